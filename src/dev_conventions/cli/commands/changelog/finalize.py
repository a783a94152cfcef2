"""Renaming the pending changelog and folding it into the merge commit."""

import logging
from pathlib import Path

from dev_conventions.cli.output import format_merge_summary, print_panel, user_output
from dev_conventions.core.changelog.render import (
    ARCHIVE_DIR_NAME,
    PENDING_CHANGELOG_NAME,
    archive_dir_path,
    archived_root_paths,
    final_changelog_path,
    finalize_changelog,
    pending_changelog_path,
)
from dev_conventions.core.changelog.state import STATE_FILE_NAME, WorkflowState, delete_state
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.git.abc import Git
from dev_conventions.core.prompt import MenuOption

logger = logging.getLogger(__name__)

EXISTING_CHANGELOG_OPTIONS = [
    MenuOption("overwrite", "Overwrite the existing changelog with the pending one"),
    MenuOption("discard", "Keep the existing changelog, discard the pending one"),
    MenuOption("abort", "Abort and resolve manually"),
]


def stageable_paths(git: Git, repo_root: Path, paths: list[Path]) -> list[Path]:
    """Filter `paths` down to the ones `git add` can act on.

    A path qualifies if it exists (directories only when non-empty) or is
    already tracked, in which case staging records its deletion.
    """
    result: list[Path] = []
    for path in paths:
        if path.is_dir():
            if any(path.iterdir()):
                result.append(path)
        elif path.exists() or git.is_tracked(repo_root, path):
            result.append(path)
    return result


def rename_pending(ctx: DevConventionsContext, repo_root: Path, short_hash: str) -> Path:
    """Rename CHANGELOG-pending.md to CHANGELOG-<short_hash>.md.

    When the permanent file already exists the operator decides whether to
    overwrite it, keep it and drop the pending changelog, or stop (default).

    Returns:
        Path of the permanent changelog

    Raises:
        SystemExit: If the operator aborts (exit code 0)
    """
    pending = pending_changelog_path(repo_root)
    final = final_changelog_path(repo_root, short_hash)

    if final.exists():
        ctx.feedback.warn(f"{final.name} already exists")
        choice = ctx.prompter.choose(
            f"Both {PENDING_CHANGELOG_NAME} and {final.name} exist",
            EXISTING_CHANGELOG_OPTIONS,
            default="abort",
        )
        match choice:
            case "overwrite":
                logger.debug("Overwriting %s", final)
            case "discard":
                pending.unlink()
                ctx.feedback.info(f"Discarded {PENDING_CHANGELOG_NAME}, keeping {final.name}")
                return final
            case _:
                ctx.feedback.info("Aborted - rename or remove one of the changelogs manually")
                raise SystemExit(0)

    finalize_changelog(repo_root, short_hash)
    ctx.feedback.info(f"Renamed: {PENDING_CHANGELOG_NAME} -> {final.name}")
    return final


def amend_merge_with_changelog(
    ctx: DevConventionsContext, repo_root: Path, state: WorkflowState
) -> str:
    """Rename the changelog after the merge commit and amend it in.

    Returns:
        Short hash of the merge commit the changelog is named after
    """
    merge_hash = ctx.git.get_short_head(repo_root)
    final = rename_pending(ctx, repo_root, merge_hash)

    paths = stageable_paths(
        ctx.git,
        repo_root,
        [
            final,
            pending_changelog_path(repo_root),
            archive_dir_path(repo_root),
            *archived_root_paths(repo_root),
        ],
    )
    ctx.git.stage_paths(repo_root, paths)
    if ctx.git.has_staged_changes(repo_root):
        ctx.git.amend_commit(repo_root)
        ctx.feedback.info("Amended merge commit with final changelog")
    else:
        logger.debug("Nothing staged after rename; merge commit left as is")

    if not ctx.git.is_worktree_clean(repo_root):
        ctx.feedback.warn("Working tree has uncommitted changes after merge")

    if ctx.prompter.confirm(f"Push {state.target} to origin?", default=False):
        ctx.git.push(repo_root, "origin", state.target)
        ctx.feedback.info(f"Pushed {state.target}")

    # Amending rewrote the merge commit; the changelog keeps the hash it was named after
    user_output()
    print_panel(format_merge_summary(state.branch, state.target, merge_hash, final.name))

    delete_state(repo_root)
    return merge_hash


def complete_orphaned_changelog(ctx: DevConventionsContext, repo_root: Path) -> None:
    """Finish a previous run that left only a pending changelog behind.

    The changelog is renamed after the current HEAD and committed: amended
    into HEAD when HEAD is a merge commit, otherwise as a new commit.
    """
    ctx.feedback.info("Completing previous merge...")
    merge_hash = ctx.git.get_short_head(repo_root)
    final = rename_pending(ctx, repo_root, merge_hash)

    paths = stageable_paths(
        ctx.git,
        repo_root,
        [
            final,
            pending_changelog_path(repo_root),
            archive_dir_path(repo_root),
            repo_root / ".gitignore",
            *archived_root_paths(repo_root),
        ],
    )
    ctx.git.stage_paths(repo_root, paths)
    if not ctx.git.has_staged_changes(repo_root):
        ctx.feedback.info("Nothing to commit")
        return

    if ctx.git.get_last_commit_subject(repo_root).startswith("Merge branch"):
        ctx.git.amend_commit(repo_root)
        ctx.feedback.info("Amended merge commit with final changelog")
    else:
        ctx.git.commit(repo_root, f"docs(changelog): add changelog for merge ({merge_hash})")
        ctx.feedback.info("Committed final changelog")


def rename_only(ctx: DevConventionsContext, repo_root: Path) -> None:
    """Rename the pending changelog after the current HEAD and print follow-up steps.

    Raises:
        SystemExit: If there is no pending changelog (exit code 1)
    """
    if not pending_changelog_path(repo_root).exists():
        ctx.feedback.error(f"No {PENDING_CHANGELOG_NAME} found in project root")
        raise SystemExit(1)

    merge_hash = ctx.git.get_short_head(repo_root)
    rename_pending(ctx, repo_root, merge_hash)

    user_output()
    user_output("To amend the merge commit:")
    user_output(f"  git add -A 'CHANGELOG-*.md' {ARCHIVE_DIR_NAME}/")
    user_output("  git commit --amend --no-edit")
    if (repo_root / STATE_FILE_NAME).exists():
        user_output(f"  rm {STATE_FILE_NAME}")
