"""Repository discovery functionality.

Discovers git repository information from a given path without requiring
full DevConventionsContext (enables config loading before context creation).
"""

from dataclasses import dataclass
from pathlib import Path

from dev_conventions.core.git.abc import Git


@dataclass(frozen=True)
class RepoContext:
    """Represents a git working tree root and its git directory."""

    root: Path
    git_dir: Path

    @property
    def hooks_dir(self) -> Path:
        return self.git_dir / "hooks"


@dataclass(frozen=True)
class NoRepoSentinel:
    """Sentinel value indicating execution outside a git repository.

    Commands that require repo context can check for this sentinel and fail
    fast.
    """

    message: str = "Not inside a git repository"


def discover_repo_or_sentinel(cwd: Path, git: Git) -> RepoContext | NoRepoSentinel:
    """Ask git for the working tree root and git directory containing `cwd`.

    Returns:
        RepoContext if inside a git repository, NoRepoSentinel otherwise
    """
    if not cwd.exists():
        return NoRepoSentinel(message=f"Start path '{cwd}' does not exist")

    root = git.get_repo_root(cwd)
    git_dir = git.get_git_dir(cwd)
    if root is None or git_dir is None:
        return NoRepoSentinel()

    return RepoContext(root=root, git_dir=git_dir)
