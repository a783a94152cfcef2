"""Pre-flight checks for the changelog command.

Before a new cycle starts, unfinished work from an earlier run must be
surfaced rather than overwritten. Checks run in this order:

1. Detached HEAD: error.
2. Git-level merge in progress (MERGE_HEAD): error. Always wins.
3. Workflow state file present: stale-state menu.
4. Pending changelog present without a state file: orphan menu.

Aborting any menu leaves the repository untouched, so running the checks
again offers the same choices.
"""

import logging
from pathlib import Path

from dev_conventions.cli.commands.changelog.finalize import complete_orphaned_changelog
from dev_conventions.cli.ensure import Ensure
from dev_conventions.core.changelog.render import PENDING_CHANGELOG_NAME, pending_changelog_path
from dev_conventions.core.changelog.state import (
    StateFileError,
    WorkflowState,
    delete_state,
    load_state,
    state_exists,
)
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.prompt import MenuOption

logger = logging.getLogger(__name__)

STALE_STATE_OPTIONS = [
    MenuOption("remove", "Remove stale state and start fresh"),
    MenuOption("continue", "Continue from saved state"),
    MenuOption("abort", "Abort"),
]

ORPHANED_CHANGELOG_OPTIONS = [
    MenuOption("remove", "Remove the pending changelog and start fresh"),
    MenuOption("complete", "Complete the previous merge"),
    MenuOption("abort", "Abort"),
]


def require_current_branch(ctx: DevConventionsContext, repo_root: Path) -> str:
    return Ensure.not_none(
        ctx.git.get_current_branch(repo_root),
        "Cannot generate changelog in detached HEAD state",
    )


def ensure_no_merge_in_progress(ctx: DevConventionsContext, repo_root: Path) -> None:
    if ctx.git.is_merge_in_progress(repo_root):
        ctx.feedback.warn("Incomplete merge detected from previous run")
        Ensure.fail(
            "A git merge is in progress. Resolve it and commit, or run 'git merge --abort', "
            "before continuing"
        )


def handle_stale_state(ctx: DevConventionsContext, repo_root: Path) -> WorkflowState | None:
    """Offer remove / continue / abort for a leftover state file.

    Returns:
        The saved state when the operator continues, None after a reset

    Raises:
        SystemExit: If the operator aborts (exit code 0)
    """
    ctx.feedback.warn("Found stale merge state file from previous run")

    options = STALE_STATE_OPTIONS
    state: WorkflowState | None = None
    try:
        state = load_state(repo_root)
    except StateFileError as e:
        ctx.feedback.warn(f"State file is unreadable: {e}")
        options = [option for option in STALE_STATE_OPTIONS if option.key != "continue"]

    if state is not None:
        ctx.feedback.detail(f"{state.branch} -> {state.target} (HEAD {state.head})")
        if state.head != ctx.git.get_short_head(repo_root):
            ctx.feedback.warn("History has diverged since last run (HEAD changed)")

    choice = ctx.prompter.choose("Stale merge state found", options, default="abort")
    logger.debug("Stale state choice: %s", choice)
    match choice:
        case "remove":
            delete_state(repo_root)
            pending_changelog_path(repo_root).unlink(missing_ok=True)
            ctx.feedback.info("Removed stale state and pending changelog")
            return None
        case "continue" if state is not None:
            ctx.feedback.info("Continuing from saved state...")
            return state
        case _:
            ctx.feedback.info("Aborted - remove the state file manually to continue")
            raise SystemExit(0)


def handle_orphaned_changelog(ctx: DevConventionsContext, repo_root: Path) -> None:
    """Offer remove / complete / abort for a pending changelog with no state.

    Raises:
        SystemExit: After completing the previous merge or aborting (exit code 0)
    """
    ctx.feedback.warn(f"Found existing {PENDING_CHANGELOG_NAME} from previous run")
    choice = ctx.prompter.choose(
        "Pending changelog found", ORPHANED_CHANGELOG_OPTIONS, default="abort"
    )
    logger.debug("Orphaned changelog choice: %s", choice)
    match choice:
        case "remove":
            pending_changelog_path(repo_root).unlink()
            ctx.feedback.info("Removed existing pending changelog")
        case "complete":
            complete_orphaned_changelog(ctx, repo_root)
            raise SystemExit(0)
        case _:
            ctx.feedback.info("Aborted - remove manually or use --rename to complete")
            raise SystemExit(0)


def run_preflight(
    ctx: DevConventionsContext, repo_root: Path, *, generate_only: bool
) -> tuple[str, WorkflowState | None]:
    """Run every pre-flight check.

    Returns:
        (current branch, saved state to resume or None)
    """
    branch = require_current_branch(ctx, repo_root)
    ensure_no_merge_in_progress(ctx, repo_root)

    if generate_only:
        return branch, None

    resumed: WorkflowState | None = None
    if state_exists(repo_root):
        resumed = handle_stale_state(ctx, repo_root)

    if not state_exists(repo_root) and pending_changelog_path(repo_root).exists():
        handle_orphaned_changelog(ctx, repo_root)

    return branch, resumed
