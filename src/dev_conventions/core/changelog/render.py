"""Changelog documents: rendering, archiving and renaming.

A cycle writes CHANGELOG-pending.md at the repository root. Once the merge
commit exists it is renamed to CHANGELOG-<short hash>.md, with the HEAD
placeholder in its header replaced by that hash. Older permanent changelogs
are moved into changelog_archive/ whenever a new cycle generates.
"""

import logging
from datetime import datetime
from pathlib import Path

from dev_conventions.core.git.abc import CommitInfo

logger = logging.getLogger(__name__)

PENDING_CHANGELOG_NAME = "CHANGELOG-pending.md"
ARCHIVE_DIR_NAME = "changelog_archive"
HEAD_PLACEHOLDER = "**HEAD:** `pending` (rename after merge)"
MAX_DIFF_STAT_LINES = 100


def pending_changelog_path(repo_root: Path) -> Path:
    return repo_root / PENDING_CHANGELOG_NAME


def final_changelog_path(repo_root: Path, short_hash: str) -> Path:
    return repo_root / f"CHANGELOG-{short_hash}.md"


def archive_dir_path(repo_root: Path) -> Path:
    return repo_root / ARCHIVE_DIR_NAME


def normalize_remote_url(url: str | None) -> str | None:
    """Turn a git remote URL into a browsable https URL.

    Example:
        >>> normalize_remote_url("git@github.com:owner/repo.git")
        'https://github.com/owner/repo'
    """
    if not url:
        return None
    url = url.strip()
    if url.endswith(".git"):
        url = url.removesuffix(".git")
    if url.startswith("git@github.com:"):
        url = "https://github.com/" + url.removeprefix("git@github.com:")
    return url.rstrip("/") or None


def format_commit_line(commit: CommitInfo, remote_url: str | None) -> str:
    if remote_url:
        link = f"{remote_url}/commit/{commit.short_hash}"
        return f"- {commit.subject} ([`{commit.short_hash}`]({link}))"
    return f"- {commit.subject} (`{commit.short_hash}`)"


def render_changelog(
    *,
    branch: str,
    target: str,
    date: datetime,
    fast_forward: bool,
    commits: list[CommitInfo],
    diff_stat: str,
    remote_url: str | None,
) -> str:
    """Render the pending changelog document.

    Commits are listed in the order given (newest first, as `git log`
    reports them). The diff stat is truncated to its first 100 lines.
    """
    merge_type = "Fast-forward" if fast_forward else "Merge commit"
    commit_lines = "\n".join(format_commit_line(c, remote_url) for c in commits)
    stat_lines = diff_stat.rstrip("\n").splitlines()[:MAX_DIFF_STAT_LINES]
    stat = "\n".join(stat_lines)

    return (
        f"# Changelog -- {branch} -> {target}\n"
        "\n"
        f"**Date:** {date.strftime('%Y-%m-%d')}\n"
        f"**Branch:** {branch}\n"
        f"**Target:** {target}\n"
        f"**Merge type:** {merge_type}\n"
        f"{HEAD_PLACEHOLDER}\n"
        "\n"
        "## Commits\n"
        "\n"
        f"{commit_lines}\n"
        "\n"
        "## Files changed\n"
        "\n"
        "```\n"
        f"{stat}\n"
        "```\n"
    )


def archive_changelogs(repo_root: Path) -> list[Path]:
    """Move every permanent changelog at the root into the archive directory.

    The archive directory is always created. The pending changelog is left in
    place.

    Returns:
        The archived paths (at their new location), sorted by name
    """
    archive_dir = archive_dir_path(repo_root)
    archive_dir.mkdir(exist_ok=True)

    archived: list[Path] = []
    for old in sorted(repo_root.glob("CHANGELOG-*.md")):
        if old.name == PENDING_CHANGELOG_NAME or not old.is_file():
            continue
        destination = archive_dir / old.name
        old.replace(destination)
        logger.debug("Archived %s", old.name)
        archived.append(destination)
    return archived


def archived_root_paths(repo_root: Path) -> list[Path]:
    """Root locations of the changelogs in the archive directory.

    Staging these records the removal of changelogs that were moved into the
    archive while still tracked at the root.
    """
    archive_dir = archive_dir_path(repo_root)
    if not archive_dir.is_dir():
        return []
    return [repo_root / path.name for path in sorted(archive_dir.glob("CHANGELOG-*.md"))]


def substitute_head(content: str, short_hash: str) -> str:
    return content.replace(HEAD_PLACEHOLDER, f"**HEAD:** `{short_hash}`")


def finalize_changelog(repo_root: Path, short_hash: str) -> Path:
    """Rename the pending changelog to its permanent, hash-suffixed name.

    The header placeholder is replaced with the hash before the rename. An
    existing permanent file of the same name is replaced; callers decide
    beforehand whether that is acceptable.

    Returns:
        Path of the permanent changelog
    """
    pending = pending_changelog_path(repo_root)
    final = final_changelog_path(repo_root, short_hash)
    content = substitute_head(pending.read_text(encoding="utf-8"), short_hash)
    pending.write_text(content, encoding="utf-8")
    pending.replace(final)
    return final
