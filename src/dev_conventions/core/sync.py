"""Syncing convention files from a remote repository into a project."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from dev_conventions.cli.constants import DEFAULT_SYNC_FILES
from dev_conventions.core.changelog.render import normalize_remote_url
from dev_conventions.core.git.abc import Git
from dev_conventions.core.remote_files import RemoteFileError, RemoteFiles
from dev_conventions.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)

GITHUB_PREFIX = "https://github.com/"
SYNC_COMMIT_MESSAGE = "chore: sync dev-conventions"


@dataclass
class SyncReport:
    """Per-file outcome of a sync run, in processing order."""

    updated: list[str] = field(default_factory=list)
    needs_staging: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def to_commit(self) -> list[str]:
        return [*self.updated, *self.needs_staging]


def github_repo_path(remote_url: str) -> str | None:
    """Extract `owner/repo` from a GitHub remote URL.

    Returns None for remotes that are not on GitHub.

    Example:
        >>> github_repo_path("git@github.com:PopCat19/dev-conventions.git")
        'PopCat19/dev-conventions'
    """
    url = normalize_remote_url(remote_url)
    if url is None or not url.startswith(GITHUB_PREFIX):
        return None
    return url.removeprefix(GITHUB_PREFIX) or None


def default_sync_files(repo_root: Path) -> list[str]:
    """Built-in convention files plus any conventions/*.md already present."""
    files = set(DEFAULT_SYNC_FILES)
    conventions_dir = repo_root / "conventions"
    if conventions_dir.is_dir():
        files.update(
            f"conventions/{path.name}" for path in conventions_dir.glob("*.md") if path.is_file()
        )
    return sorted(files)


def normalize_content(content: str) -> str:
    """Files are stored with exactly one trailing newline."""
    return content.rstrip("\n") + "\n"


def write_atomically(path: Path, content: str) -> None:
    """Write via a sibling temp file and rename, keeping existing permissions."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f"{path.name}.tmp")
    tmp.write_text(content, encoding="utf-8")
    if path.exists():
        shutil.copymode(path, tmp)
    tmp.replace(path)


def sync_files(
    git: Git,
    remote_files: RemoteFiles,
    feedback: UserFeedback,
    repo_root: Path,
    *,
    repo_path: str,
    ref: str,
    files: list[str],
    dry_run: bool,
) -> SyncReport:
    """Fetch each file and write the ones whose content changed.

    A file whose content already matches is skipped when it is tracked and
    unmodified, and queued for staging otherwise. Fetch failures are recorded
    and do not stop the run.
    """
    report = SyncReport()
    for name in files:
        feedback.detail(f"Checking {name}...")
        try:
            content = normalize_content(remote_files.fetch_file(repo_path, ref, name))
        except RemoteFileError as e:
            feedback.error(str(e))
            report.failed.append(name)
            continue

        local = repo_root / name
        if local.is_file() and local.read_text(encoding="utf-8") == content:
            if git.is_tracked(repo_root, local) and not git.has_local_modifications(
                repo_root, local
            ):
                feedback.detail("Unchanged, skipping")
                report.skipped.append(name)
            else:
                feedback.detail("Needs staging")
                report.needs_staging.append(name)
            continue

        if dry_run:
            feedback.detail("Would update (dry-run)")
        else:
            write_atomically(local, content)
            feedback.detail("Updated")
        logger.debug("Updated %s (dry_run=%s)", name, dry_run)
        report.updated.append(name)

    return report
