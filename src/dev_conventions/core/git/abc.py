"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
changelog workflow testable without a real repository.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit (tests/fakes/git.py): In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ConflictStatus(Enum):
    """Two-letter unmerged status codes reported by `git status`."""

    BOTH_MODIFIED = "UU"
    BOTH_ADDED = "AA"
    BOTH_DELETED = "DD"
    ADDED_BY_US = "AU"
    ADDED_BY_THEM = "UA"
    DELETED_BY_US = "DU"
    DELETED_BY_THEM = "UD"

    @property
    def description(self) -> str:
        match self:
            case ConflictStatus.BOTH_MODIFIED:
                return "both modified"
            case ConflictStatus.BOTH_ADDED:
                return "both added"
            case ConflictStatus.BOTH_DELETED:
                return "both deleted"
            case ConflictStatus.ADDED_BY_US:
                return "added by us"
            case ConflictStatus.ADDED_BY_THEM:
                return "added by them"
            case ConflictStatus.DELETED_BY_US:
                return "deleted by us"
            case ConflictStatus.DELETED_BY_THEM:
                return "deleted by them"


@dataclass(frozen=True)
class ConflictedPath:
    """A path left unmerged by a failed merge."""

    path: str
    status: ConflictStatus


@dataclass(frozen=True)
class CommitInfo:
    """A single commit in a log range."""

    subject: str
    short_hash: str


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a `git merge` invocation.

    A failed merge is not an exception: the caller decides whether the
    failure is a conflict to resolve or an error to report.
    """

    success: bool
    output: str


def parse_unmerged_entries(porcelain_v2: str) -> list[ConflictedPath]:
    """Parse the unmerged entries of `git status --porcelain=v2 -z` output.

    Unmerged entries look like:
        u <XY> <sub> <m1> <m2> <m3> <mW> <h1> <h2> <h3> <path>

    Rename/copy entries ("2 ...") are followed by an extra NUL-separated
    original path, which is skipped.
    """
    conflicts: list[ConflictedPath] = []
    records = porcelain_v2.split("\0")
    index = 0
    while index < len(records):
        record = records[index]
        index += 1
        if record.startswith("2 "):
            index += 1
            continue
        if not record.startswith("u "):
            continue
        parts = record.split(" ", 10)
        if len(parts) < 11:
            continue
        conflicts.append(ConflictedPath(path=parts[10], status=ConflictStatus(parts[1])))
    return sorted(conflicts, key=lambda c: c.path)


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    # Repository discovery

    @abstractmethod
    def get_repo_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the working tree, or None outside a repo."""
        ...

    @abstractmethod
    def get_git_dir(self, cwd: Path) -> Path | None:
        """Get the absolute path of the repository's git directory."""
        ...

    @abstractmethod
    def is_merge_in_progress(self, repo_root: Path) -> bool:
        """Check whether a git-level merge is in progress (MERGE_HEAD exists)."""
        ...

    # Branches and refs

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch, or None for a detached HEAD."""
        ...

    @abstractmethod
    def list_remote_branches(self, repo_root: Path) -> list[str]:
        """List all remote branch names in the repository.

        Returns branch names in format 'origin/branch-name', 'upstream/feature', etc.

        Args:
            repo_root: Path to the repository root

        Returns:
            List of remote branch names with remote prefix (e.g., 'origin/main')
        """
        ...

    @abstractmethod
    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        """Get the configured URL of a remote, or None if it is not configured."""
        ...

    @abstractmethod
    def get_short_head(self, repo_root: Path) -> str:
        """Get the abbreviated hash of HEAD."""
        ...

    @abstractmethod
    def is_ancestor(self, repo_root: Path, ancestor: str, descendant: str) -> bool:
        """Check whether `ancestor` is reachable from `descendant`."""
        ...

    @abstractmethod
    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        """Checkout a branch in the given directory."""
        ...

    @abstractmethod
    def create_annotated_tag(self, repo_root: Path, name: str, message: str) -> None:
        """Create an annotated tag at HEAD."""
        ...

    # History

    @abstractmethod
    def list_commits(self, repo_root: Path, base: str) -> list[CommitInfo]:
        """List non-merge commits in `base..HEAD`, newest first."""
        ...

    @abstractmethod
    def get_diff_stat(self, repo_root: Path, base: str) -> str:
        """Get `git diff --stat base...HEAD` output."""
        ...

    @abstractmethod
    def get_last_commit_subject(self, repo_root: Path) -> str:
        """Get the subject line of the HEAD commit."""
        ...

    # Index and commits

    @abstractmethod
    def is_tracked(self, repo_root: Path, path: Path) -> bool:
        """Check whether a path is known to the index."""
        ...

    @abstractmethod
    def has_local_modifications(self, repo_root: Path, path: Path) -> bool:
        """Check whether a tracked path differs from the index."""
        ...

    @abstractmethod
    def stage_paths(self, repo_root: Path, paths: list[Path]) -> None:
        """Stage additions, modifications and deletions of the given paths."""
        ...

    @abstractmethod
    def has_staged_changes(self, repo_root: Path) -> bool:
        """Check if the repository has staged changes."""
        ...

    @abstractmethod
    def commit(self, repo_root: Path, message: str) -> None:
        """Create a commit from the index."""
        ...

    @abstractmethod
    def amend_commit(self, repo_root: Path) -> None:
        """Amend HEAD with the index, keeping its message."""
        ...

    @abstractmethod
    def is_worktree_clean(self, repo_root: Path) -> bool:
        """Check for a clean working tree.

        This is a best-effort check: if git cannot report status the tree is
        treated as clean.
        """
        ...

    # Remotes

    @abstractmethod
    def push(self, repo_root: Path, remote: str | None, branch: str | None) -> None:
        """Push to a remote. With remote and branch None, pushes to the upstream."""
        ...

    @abstractmethod
    def pull_branch(self, repo_root: Path, remote: str, branch: str) -> bool:
        """Pull a branch from a remote.

        Best-effort: returns False instead of raising when the pull fails.
        """
        ...

    # Merging

    @abstractmethod
    def merge_branch(
        self, repo_root: Path, branch: str, *, message: str, prefer_theirs: bool
    ) -> MergeResult:
        """Merge `branch` into the current branch with --no-ff.

        Args:
            repo_root: Path to the repository root
            branch: Branch to merge
            message: Merge commit message
            prefer_theirs: Add --strategy-option=theirs
        """
        ...

    @abstractmethod
    def list_conflicts(self, repo_root: Path) -> list[ConflictedPath]:
        """List unmerged paths with their conflict status, sorted by path."""
        ...

    @abstractmethod
    def get_unmerged_stages(self, repo_root: Path, path: str) -> set[int]:
        """Get the index stages (1 base, 2 ours, 3 theirs) present for a path."""
        ...

    @abstractmethod
    def write_stage(self, repo_root: Path, path: str, stage: int) -> bool:
        """Write the blob at the given index stage to the working tree path."""
        ...

    @abstractmethod
    def checkout_theirs(self, repo_root: Path, path: str) -> bool:
        """Take the incoming side of a conflicted path. Returns success."""
        ...

    @abstractmethod
    def remove_path(self, repo_root: Path, path: str) -> bool:
        """Remove a path from the index and working tree. Returns success."""
        ...

    @abstractmethod
    def add_path(self, repo_root: Path, path: str) -> bool:
        """Mark a path as resolved by adding it. Returns success."""
        ...

    @abstractmethod
    def restore_worktree(self, repo_root: Path) -> None:
        """Reset tracked working tree files to the index (best-effort)."""
        ...

    @abstractmethod
    def clean_untracked(self, repo_root: Path) -> None:
        """Remove untracked files and directories (best-effort)."""
        ...
