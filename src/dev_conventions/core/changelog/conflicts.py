"""Forced resolution of merge conflicts in favour of the incoming branch."""

import logging
from pathlib import Path

from dev_conventions.core.git.abc import ConflictedPath, Git
from dev_conventions.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)

OURS_STAGE = 2
THEIRS_STAGE = 3


def resolve_path_theirs(git: Git, repo_root: Path, path: str) -> bool:
    """Resolve one conflicted path, preferring the incoming version.

    Priority order:
    1. Path no longer exists on disk: remove it from the index.
    2. The incoming side (stage 3) has a blob: write it and add it.
    3. Only our side (stage 2) has the path: remove it.
    4. Otherwise: `git checkout --theirs` and add it.

    Returns:
        True if the path was resolved
    """
    if not (repo_root / path).exists():
        return git.remove_path(repo_root, path)

    stages = git.get_unmerged_stages(repo_root, path)
    logger.debug("Unmerged stages for %s: %s", path, sorted(stages))
    if THEIRS_STAGE in stages:
        if git.write_stage(repo_root, path, THEIRS_STAGE) and git.add_path(repo_root, path):
            return True

    if OURS_STAGE in stages and THEIRS_STAGE not in stages:
        return git.remove_path(repo_root, path)

    if git.checkout_theirs(repo_root, path):
        return git.add_path(repo_root, path)
    return False


def force_resolve_theirs(
    git: Git,
    feedback: UserFeedback,
    repo_root: Path,
    conflicts: list[ConflictedPath],
    *,
    merge_message: str,
) -> list[str]:
    """Resolve every conflicted path and commit the merge.

    After the per-path resolution the working tree is reset to the index and
    untracked leftovers (e.g. the losing side of a rename/rename conflict)
    are cleaned, both best-effort. Nothing is cleaned or committed while any
    path is still unresolved.

    Returns:
        Paths that could not be resolved automatically (empty once committed)
    """
    feedback.warn("Auto-resolving conflicts by preferring incoming changes...")

    unresolved: list[str] = []
    for conflict in conflicts:
        if not resolve_path_theirs(git, repo_root, conflict.path):
            feedback.warn(f"Could not auto-resolve: {conflict.path} (resolve manually)")
            unresolved.append(conflict.path)
    if unresolved:
        return unresolved

    git.restore_worktree(repo_root)
    git.clean_untracked(repo_root)

    git.commit(repo_root, f"{merge_message} (force theirs)")
    feedback.info("Force merge completed with incoming changes")
    return unresolved
