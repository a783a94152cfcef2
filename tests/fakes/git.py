"""Fake implementation of Git for testing.

FakeGit keeps an in-memory model of a single repository: the current branch,
HEAD, which paths are tracked, and what is staged. It records every mutating
call so tests can assert on the sequence of git operations a command ran.
"""

from pathlib import Path

from dev_conventions.core.git.abc import (
    CommitInfo,
    ConflictedPath,
    Git,
    MergeResult,
)


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    Constructor Injection:
    - All state is provided via constructor parameters
    - Mutations happen only through the Git interface, the same way a real
      repository would change

    Examples:
        # A feature branch two commits ahead of main
        >>> git = FakeGit(
        ...     repo_root=repo_root,
        ...     current_branch="feat-x",
        ...     commits={
        ...         "main": [CommitInfo("feat: b", "bbb2222"), CommitInfo("feat: a", "aaa1111")]
        ...     },
        ... )

        # A merge that stops on a conflict
        >>> git = FakeGit(
        ...     merge_success=False,
        ...     conflicts=[ConflictedPath("README.md", ConflictStatus.BOTH_MODIFIED)],
        ... )
    """

    def __init__(
        self,
        *,
        repo_root: Path | None = None,
        current_branch: str | None = "main",
        head: str = "abc1234",
        commit_hashes: list[str] | None = None,
        merge_in_progress: bool = False,
        remote_branches: list[str] | None = None,
        remote_urls: dict[str, str] | None = None,
        ancestors: set[tuple[str, str]] | None = None,
        commits: dict[str, list[CommitInfo]] | None = None,
        diff_stats: dict[str, str] | None = None,
        last_commit_subject: str = "Initial commit",
        tracked_paths: set[Path] | None = None,
        modified_paths: set[Path] | None = None,
        worktree_clean: bool = True,
        pull_succeeds: bool = True,
        merge_success: bool = True,
        merge_output: str = "",
        conflicts: list[ConflictedPath] | None = None,
        unmerged_stages: dict[str, set[int]] | None = None,
        unresolvable_paths: set[str] | None = None,
    ) -> None:
        """Initialize fake with predetermined repository state.

        Args:
            repo_root: Working tree root reported for any cwd inside it
            current_branch: Branch checked out at start, None for detached HEAD
            head: Short hash of HEAD at start
            commit_hashes: Hashes HEAD takes after each commit, merge or amend,
                in order. Generated when exhausted.
            ancestors: (ancestor, descendant) pairs for which is_ancestor() is True
            commits: list_commits() result per base branch
            diff_stats: get_diff_stat() result per base branch
            tracked_paths: Paths known to the index at start
            modified_paths: Tracked paths that differ from the index
            merge_success: Whether merge_branch() succeeds
            conflicts: Paths list_conflicts() reports after a failed merge
            unmerged_stages: Index stages per conflicted path
            unresolvable_paths: Paths whose resolution operations fail
        """
        self._repo_root = repo_root
        self._current_branch = current_branch
        self._head = head
        self._commit_hashes = list(commit_hashes or [])
        self._generated = 0
        self._merge_in_progress = merge_in_progress
        self._remote_branches = remote_branches or []
        self._remote_urls = remote_urls or {}
        self._ancestors = ancestors or set()
        self._commits = commits or {}
        self._diff_stats = diff_stats or {}
        self._last_commit_subject = last_commit_subject
        self._tracked = set(tracked_paths or set())
        self._modified = set(modified_paths or set())
        self._worktree_clean = worktree_clean
        self._pull_succeeds = pull_succeeds
        self._merge_success = merge_success
        self._merge_output = merge_output
        self._conflicts = conflicts or []
        self._unmerged_stages = unmerged_stages or {}
        self._unresolvable = unresolvable_paths or set()

        self._staged: set[Path] = set()
        self._commit_messages: list[str] = []
        self._amend_count = 0
        self._pushes: list[tuple[str | None, str | None]] = []
        self._pulls: list[tuple[str, str]] = []
        self._checkouts: list[str] = []
        self._tags: list[tuple[str, str]] = []
        self._merges: list[tuple[str, str, bool]] = []
        self._staged_batches: list[list[Path]] = []
        self._resolution_calls: list[tuple[str, str]] = []
        self._restore_calls = 0
        self._clean_calls = 0

    def _advance_head(self) -> str:
        if self._commit_hashes:
            self._head = self._commit_hashes.pop(0)
        else:
            self._generated += 1
            self._head = f"f{self._generated:06x}"
        return self._head

    # Repository discovery

    def get_repo_root(self, cwd: Path) -> Path | None:
        if self._repo_root is None:
            return None
        if cwd == self._repo_root or self._repo_root in cwd.parents:
            return self._repo_root
        return None

    def get_git_dir(self, cwd: Path) -> Path | None:
        root = self.get_repo_root(cwd)
        return root / ".git" if root is not None else None

    def is_merge_in_progress(self, repo_root: Path) -> bool:
        return self._merge_in_progress

    # Branches and refs

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branch

    def list_remote_branches(self, repo_root: Path) -> list[str]:
        return list(self._remote_branches)

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        return self._remote_urls.get(remote)

    def get_short_head(self, repo_root: Path) -> str:
        return self._head

    def is_ancestor(self, repo_root: Path, ancestor: str, descendant: str) -> bool:
        return (ancestor, descendant) in self._ancestors

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        self._checkouts.append(branch)
        self._current_branch = branch

    def create_annotated_tag(self, repo_root: Path, name: str, message: str) -> None:
        self._tags.append((name, message))

    # History

    def list_commits(self, repo_root: Path, base: str) -> list[CommitInfo]:
        return list(self._commits.get(base, []))

    def get_diff_stat(self, repo_root: Path, base: str) -> str:
        return self._diff_stats.get(base, "")

    def get_last_commit_subject(self, repo_root: Path) -> str:
        return self._last_commit_subject

    # Index and commits

    def is_tracked(self, repo_root: Path, path: Path) -> bool:
        return path in self._tracked

    def has_local_modifications(self, repo_root: Path, path: Path) -> bool:
        return path in self._modified

    def stage_paths(self, repo_root: Path, paths: list[Path]) -> None:
        self._staged_batches.append(list(paths))
        for path in paths:
            changed = path not in self._tracked or path in self._modified or not path.exists()
            if changed or path.is_dir():
                self._staged.add(path)

    def has_staged_changes(self, repo_root: Path) -> bool:
        return bool(self._staged)

    def _record_commit(self, message: str) -> None:
        for path in self._staged:
            if path.exists():
                self._tracked.add(path)
            else:
                self._tracked.discard(path)
            self._modified.discard(path)
        self._staged.clear()
        self._last_commit_subject = message.splitlines()[0] if message else ""
        self._advance_head()

    def commit(self, repo_root: Path, message: str) -> None:
        self._commit_messages.append(message)
        self._merge_in_progress = False
        self._conflicts = []
        self._record_commit(message)

    def amend_commit(self, repo_root: Path) -> None:
        self._amend_count += 1
        self._record_commit(self._last_commit_subject)

    def is_worktree_clean(self, repo_root: Path) -> bool:
        return self._worktree_clean

    # Remotes

    def push(self, repo_root: Path, remote: str | None, branch: str | None) -> None:
        self._pushes.append((remote, branch))

    def pull_branch(self, repo_root: Path, remote: str, branch: str) -> bool:
        self._pulls.append((remote, branch))
        return self._pull_succeeds

    # Merging

    def merge_branch(
        self, repo_root: Path, branch: str, *, message: str, prefer_theirs: bool
    ) -> MergeResult:
        self._merges.append((branch, message, prefer_theirs))
        if not self._merge_success:
            self._merge_in_progress = bool(self._conflicts)
            return MergeResult(success=False, output=self._merge_output)
        self._last_commit_subject = message
        self._advance_head()
        return MergeResult(success=True, output=self._merge_output)

    def list_conflicts(self, repo_root: Path) -> list[ConflictedPath]:
        return sorted(self._conflicts, key=lambda c: c.path)

    def get_unmerged_stages(self, repo_root: Path, path: str) -> set[int]:
        return set(self._unmerged_stages.get(path, set()))

    def _resolution(self, operation: str, path: str) -> bool:
        self._resolution_calls.append((operation, path))
        return path not in self._unresolvable

    def write_stage(self, repo_root: Path, path: str, stage: int) -> bool:
        return self._resolution(f"write_stage:{stage}", path)

    def checkout_theirs(self, repo_root: Path, path: str) -> bool:
        return self._resolution("checkout_theirs", path)

    def remove_path(self, repo_root: Path, path: str) -> bool:
        return self._resolution("remove", path)

    def add_path(self, repo_root: Path, path: str) -> bool:
        return self._resolution("add", path)

    def restore_worktree(self, repo_root: Path) -> None:
        self._restore_calls += 1

    def clean_untracked(self, repo_root: Path) -> None:
        self._clean_calls += 1

    # Read-only properties for test assertions

    @property
    def current_branch(self) -> str | None:
        return self._current_branch

    @property
    def head(self) -> str:
        return self._head

    @property
    def commit_messages(self) -> list[str]:
        """Messages of commits created with commit(), in order."""
        return list(self._commit_messages)

    @property
    def amend_count(self) -> int:
        return self._amend_count

    @property
    def pushes(self) -> list[tuple[str | None, str | None]]:
        return list(self._pushes)

    @property
    def pulls(self) -> list[tuple[str, str]]:
        return list(self._pulls)

    @property
    def checkouts(self) -> list[str]:
        return list(self._checkouts)

    @property
    def tags(self) -> list[tuple[str, str]]:
        """Annotated tags created, as (name, message) tuples."""
        return list(self._tags)

    @property
    def merges(self) -> list[tuple[str, str, bool]]:
        """merge_branch() calls, as (branch, message, prefer_theirs) tuples."""
        return list(self._merges)

    @property
    def staged_batches(self) -> list[list[Path]]:
        """Arguments of each stage_paths() call."""
        return [list(batch) for batch in self._staged_batches]

    @property
    def resolution_calls(self) -> list[tuple[str, str]]:
        """Conflict resolution operations, as (operation, path) tuples."""
        return list(self._resolution_calls)

    @property
    def restore_calls(self) -> int:
        return self._restore_calls

    @property
    def clean_calls(self) -> int:
        return self._clean_calls
