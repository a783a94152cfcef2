"""Committing the changelog and merging the feature branch into the target.

Stages of a run, each recorded in the state file once reached:

    changelog committed -> (push branch) -> target checked out -> merge attempted
        -> clean | conflicted -> [forced resolution] -> merged

Renaming and amending happen afterwards in finalize.py.
"""

import logging
from pathlib import Path

from dev_conventions.cli.commands.changelog.finalize import stageable_paths
from dev_conventions.cli.output import user_output
from dev_conventions.core.changelog.conflicts import force_resolve_theirs
from dev_conventions.core.changelog.render import (
    ARCHIVE_DIR_NAME,
    archive_dir_path,
    archived_root_paths,
    pending_changelog_path,
)
from dev_conventions.core.changelog.state import (
    WorkflowStage,
    WorkflowState,
    append_merged,
    save_state,
)
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.git.abc import ConflictedPath
from dev_conventions.core.prompt import MenuOption

logger = logging.getLogger(__name__)

CHANGELOG_PREVIEW_LINES = 30
FORCE_CONFIRMATION_PHRASE = "i understand"

CONFLICT_OPTIONS = [
    MenuOption("force", "Force merge (prefer incoming)"),
    MenuOption("abort", "Exit and resolve manually"),
]


def merge_message(branch: str, target: str) -> str:
    return f"Merge branch '{branch}' into {target}"


def backup_tag_name(ctx: DevConventionsContext, target: str) -> str:
    return f"{target}-{ctx.time.now().strftime('%Y%m%d-%H%M%S')}"


def _show_changelog_preview(changelog: Path) -> None:
    lines = changelog.read_text(encoding="utf-8").splitlines()
    user_output()
    for line in lines[:CHANGELOG_PREVIEW_LINES]:
        user_output(line)
    if len(lines) > CHANGELOG_PREVIEW_LINES:
        user_output("  ...")
    user_output()


def _show_manual_merge_steps(branch: str, target: str) -> None:
    user_output()
    user_output("Changelog saved. Manual steps:")
    user_output(f"  1. git add -A 'CHANGELOG-*.md' {ARCHIVE_DIR_NAME}/")
    user_output(f'  2. git commit -m "docs(changelog): add changelog for {branch} merge"')
    user_output(f"  3. git checkout {target} && git merge {branch}")
    user_output("  4. dev-conventions changelog --rename")


def _show_conflict_steps(backup_tag: str) -> None:
    user_output()
    user_output("Resolve conflicts, then:")
    user_output("  1. git add <resolved-files>")
    user_output("  2. git commit")
    user_output("  3. dev-conventions changelog (choose 'continue' to finish)")
    user_output()
    user_output("To return to the state before the merge:")
    user_output(f"  git reset --hard {backup_tag}")


def commit_changelog(
    ctx: DevConventionsContext, repo_root: Path, *, branch: str, target: str
) -> WorkflowState:
    """Commit the pending changelog on the feature branch and record the state.

    Raises:
        SystemExit: If the operator declines (exit code 0, manual steps printed)
    """
    changelog = pending_changelog_path(repo_root)
    _show_changelog_preview(changelog)

    if not ctx.prompter.confirm(f"Commit changelog and merge {branch} -> {target}?"):
        _show_manual_merge_steps(branch, target)
        raise SystemExit(0)

    paths = stageable_paths(
        ctx.git,
        repo_root,
        [
            changelog,
            archive_dir_path(repo_root),
            repo_root / ".gitignore",
            *archived_root_paths(repo_root),
        ],
    )
    ctx.git.stage_paths(repo_root, paths)
    if ctx.git.has_staged_changes(repo_root):
        ctx.git.commit(repo_root, f"docs(changelog): add changelog for {branch} merge")
        ctx.feedback.info(f"Committed changelog on {branch}")
    else:
        logger.debug("Changelog already committed; nothing staged")

    state = WorkflowState(
        branch=branch,
        target=target,
        head=ctx.git.get_short_head(repo_root),
        stages=(WorkflowStage.CHANGELOG_COMMITTED,),
    )
    save_state(repo_root, state)
    return state


def _list_conflicts(conflicts: list[ConflictedPath]) -> None:
    user_output()
    user_output(f"Conflicting files ({len(conflicts)} total):")
    user_output("==================")
    for conflict in conflicts:
        user_output(f"  {conflict.path} ({conflict.status.description})")
    user_output()


def _resolve_conflicts(
    ctx: DevConventionsContext,
    repo_root: Path,
    state: WorkflowState,
    conflicts: list[ConflictedPath],
    backup_tag: str,
) -> None:
    """Ask how to handle conflicts, forcing the incoming side if confirmed.

    Raises:
        SystemExit: If the operator does not force the merge or a path stays
            unresolved (exit code 1)
    """
    _list_conflicts(conflicts)

    choice = ctx.prompter.choose("Merge conflicts detected", CONFLICT_OPTIONS, default="abort")
    if choice != "force":
        ctx.feedback.info("Aborted - resolve conflicts manually")
        _show_conflict_steps(backup_tag)
        raise SystemExit(1)

    phrase = ctx.prompter.ask("Type 'I understand' to force merge (prefers incoming changes):")
    if phrase.strip().lower() != FORCE_CONFIRMATION_PHRASE:
        ctx.feedback.info("Aborted - resolve conflicts manually")
        _show_conflict_steps(backup_tag)
        raise SystemExit(1)

    unresolved = force_resolve_theirs(
        ctx.git,
        ctx.feedback,
        repo_root,
        conflicts,
        merge_message=merge_message(state.branch, state.target),
    )
    if unresolved:
        ctx.feedback.error(f"{len(unresolved)} file(s) still need manual resolution")
        _show_conflict_steps(backup_tag)
        raise SystemExit(1)


def merge_into_target(
    ctx: DevConventionsContext, repo_root: Path, state: WorkflowState, *, prefer_theirs: bool
) -> WorkflowState:
    """Merge the feature branch into the target and record the merge.

    A backup tag is created before every merge attempt. If the feature branch
    is already contained in the target (a resumed run whose merge was
    completed by hand) no merge is attempted.

    Raises:
        SystemExit: If conflicts stay unresolved or the merge fails (exit code 1)
    """
    branch, target = state.branch, state.target

    if ctx.prompter.confirm(f"Push {branch} to origin before merge?"):
        ctx.git.push(repo_root, "origin", branch)
        ctx.feedback.info(f"Pushed {branch}")

    ctx.feedback.info(f"Switching to {target}...")
    ctx.git.checkout_branch(repo_root, target)
    if not ctx.git.pull_branch(repo_root, "origin", target):
        ctx.feedback.warn(f"Could not pull {target} from origin, continuing with local branch")

    if ctx.git.is_ancestor(repo_root, branch, "HEAD"):
        ctx.feedback.info(f"{branch} is already merged into {target}")
    else:
        tag = backup_tag_name(ctx, target)
        ctx.git.create_annotated_tag(
            repo_root, tag, f"Backup before merge of {branch} into {target}"
        )
        ctx.feedback.info(f"Created backup tag: {tag}")

        ctx.feedback.info(f"Merging {branch} into {target}...")
        if prefer_theirs:
            ctx.feedback.info("Using --strategy-option=theirs (preferring incoming changes)")
        result = ctx.git.merge_branch(
            repo_root, branch, message=merge_message(branch, target), prefer_theirs=prefer_theirs
        )

        if not result.success:
            conflicts = ctx.git.list_conflicts(repo_root)
            if not conflicts:
                ctx.feedback.error(f"Merge of {branch} into {target} failed")
                if result.output:
                    user_output(result.output)
                raise SystemExit(1)
            ctx.feedback.error("Merge conflicts detected")
            _resolve_conflicts(ctx, repo_root, state, conflicts, tag)

        ctx.feedback.success(f"Merged {branch} into {target}")

    return append_merged(repo_root, state, ctx.git.get_short_head(repo_root))
