"""Generating the pending changelog from `target..HEAD`."""

import logging
from pathlib import Path

from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import user_output
from dev_conventions.core.changelog.render import (
    ARCHIVE_DIR_NAME,
    archive_changelogs,
    normalize_remote_url,
    pending_changelog_path,
    render_changelog,
)
from dev_conventions.core.changelog.state import ensure_gitignored
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.git.abc import CommitInfo

logger = logging.getLogger(__name__)

PREVIEW_COMMITS = 10


def _show_commit_preview(commits: list[CommitInfo]) -> None:
    user_output()
    user_output("Commits to be included:")
    for commit in commits[:PREVIEW_COMMITS]:
        user_output(f"  {commit.short_hash} {commit.subject}")
    if len(commits) > PREVIEW_COMMITS:
        user_output(f"  ... and {len(commits) - PREVIEW_COMMITS} more")
    user_output()


def generate_pending_changelog(
    ctx: DevConventionsContext, repo_root: Path, *, branch: str, target: str
) -> Path:
    """Write CHANGELOG-pending.md for the commits on `branch` missing from `target`.

    Nothing on disk changes until the operator confirms: the state file
    ignore entry, the archive move and the pending changelog are all written
    after the confirmation.

    Raises:
        SystemExit: With no commits in range (exit code 1) or when the operator
            declines (exit code 0)
    """
    commits = ctx.git.list_commits(repo_root, target)
    Ensure.invariant(len(commits) > 0, f"No new commits relative to {target}")

    ctx.feedback.info(f"Found {len(commits)} commits to include in changelog")
    _show_commit_preview(commits)

    if not ctx.prompter.confirm(f"Generate changelog for {len(commits)} commits?"):
        ctx.feedback.info("Aborted")
        raise SystemExit(0)

    if ensure_gitignored(repo_root):
        logger.debug("Added state file to .gitignore")

    for archived in archive_changelogs(repo_root):
        ctx.feedback.info(f"Archived: {archived.name} -> {ARCHIVE_DIR_NAME}/")

    changelog = pending_changelog_path(repo_root)
    ctx.feedback.info(f"Generating changelog: {changelog.name}")
    content = render_changelog(
        branch=branch,
        target=target,
        date=ctx.time.now(),
        fast_forward=ctx.git.is_ancestor(repo_root, target, "HEAD"),
        commits=commits,
        diff_stat=ctx.git.get_diff_stat(repo_root, target),
        remote_url=normalize_remote_url(ctx.git.get_remote_url(repo_root, "origin")),
    )
    changelog.write_text(content, encoding="utf-8")
    ctx.feedback.success(f"Generated: {changelog.name}")
    return changelog


def show_generate_only_steps(changelog: Path) -> None:
    user_output()
    user_output("Next steps:")
    user_output(f"  1. Review the changelog: cat {changelog.name}")
    user_output(f"  2. Commit before merge: git add -A 'CHANGELOG-*.md' {ARCHIVE_DIR_NAME}/")
    user_output("  3. After merge, rename: dev-conventions changelog --rename")
