"""CLI command entry point for changelog."""

import dataclasses
import logging
import os
from pathlib import Path

import click

from dev_conventions.cli.commands.changelog.finalize import (
    amend_merge_with_changelog,
    rename_only,
)
from dev_conventions.cli.commands.changelog.generation import (
    generate_pending_changelog,
    show_generate_only_steps,
)
from dev_conventions.cli.commands.changelog.merge import commit_changelog, merge_into_target
from dev_conventions.cli.commands.changelog.preflight import run_preflight
from dev_conventions.cli.commands.changelog.target import select_target
from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import user_output
from dev_conventions.core.changelog.render import PENDING_CHANGELOG_NAME, pending_changelog_path
from dev_conventions.core.changelog.state import WorkflowStage, WorkflowState
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.prompt import AutoConfirmPrompter

logger = logging.getLogger(__name__)

# Enable debug logging if DEV_CONVENTIONS_DEBUG environment variable is set
if os.getenv("DEV_CONVENTIONS_DEBUG"):
    logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")


@click.command("changelog")
@click.option("--target", "target", help="Branch to merge into (skips the branch menu).")
@click.option(
    "--rename",
    is_flag=True,
    help="Rename CHANGELOG-pending.md after the current HEAD and exit.",
)
@click.option(
    "--generate-only",
    is_flag=True,
    help="Write the pending changelog without committing or merging.",
)
@click.option(
    "--theirs",
    is_flag=True,
    help="Merge with --strategy-option=theirs (prefer incoming changes).",
)
@click.option("-y", "--yes", is_flag=True, help="Skip confirmations and take menu defaults.")
@click.pass_obj
def changelog_cmd(
    ctx: DevConventionsContext,
    target: str | None,
    rename: bool,
    generate_only: bool,
    theirs: bool,
    yes: bool,
) -> None:
    """Generate a changelog and merge the current branch into a target.

    The changelog lists the commits in TARGET..HEAD. It is committed on the
    feature branch, the branch is merged with --no-ff, and the changelog is
    renamed after the merge commit and amended into it.

    Progress is recorded in .changelog-merge-state so an interrupted run can
    be continued. A backup tag named <target>-<UTC timestamp> is created before
    every merge attempt.

    Example:
        dev-conventions changelog --target main
    """
    logger.debug(
        "Command invoked: changelog(target=%s, rename=%s, generate_only=%s, theirs=%s, yes=%s)",
        target,
        rename,
        generate_only,
        theirs,
        yes,
    )
    repo = Ensure.in_repo(ctx)

    if yes:
        ctx = dataclasses.replace(ctx, prompter=AutoConfirmPrompter())

    try:
        if rename:
            rename_only(ctx, repo.root)
        else:
            _run_workflow(ctx, repo.root, target, generate_only=generate_only, theirs=theirs)
    except RuntimeError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e


def _run_workflow(
    ctx: DevConventionsContext,
    repo_root: Path,
    target: str | None,
    *,
    generate_only: bool,
    theirs: bool,
) -> None:
    branch, resumed = run_preflight(ctx, repo_root, generate_only=generate_only)
    logger.debug("Current branch: %s, resumed state: %s", branch, resumed)

    state: WorkflowState
    if resumed is not None:
        Ensure.invariant(
            pending_changelog_path(repo_root).exists(),
            f"Saved state found but {PENDING_CHANGELOG_NAME} is missing. "
            "Run again and choose 'remove' to start fresh",
        )
        state = resumed
        if target is not None and target != state.target:
            ctx.feedback.warn(f"Using --target {target} instead of saved target {state.target}")
            state = dataclasses.replace(state, target=target)
        if not state.has_stage(WorkflowStage.CHANGELOG_COMMITTED):
            state = commit_changelog(ctx, repo_root, branch=state.branch, target=state.target)
    else:
        resolved_target = select_target(ctx, repo_root, target)
        Ensure.invariant(
            resolved_target != branch,
            f"Already on {resolved_target}, switch to feature branch",
        )

        changelog = generate_pending_changelog(
            ctx, repo_root, branch=branch, target=resolved_target
        )
        if generate_only:
            show_generate_only_steps(changelog)
            return

        state = commit_changelog(ctx, repo_root, branch=branch, target=resolved_target)

    if not state.has_stage(WorkflowStage.MERGED):
        state = merge_into_target(ctx, repo_root, state, prefer_theirs=theirs)
    elif ctx.git.get_current_branch(repo_root) != state.target:
        ctx.git.checkout_branch(repo_root, state.target)

    amend_merge_with_changelog(ctx, repo_root, state)
