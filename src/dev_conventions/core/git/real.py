"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import subprocess
from pathlib import Path

from dev_conventions.core.git.abc import (
    CommitInfo,
    ConflictedPath,
    Git,
    MergeResult,
    parse_unmerged_entries,
)
from dev_conventions.core.subprocess import run_subprocess_with_context

# Separates subject from hash in `git log` output; never appears in subjects.
_FIELD_SEP = "\x1f"

# ============================================================================
# Production Implementation
# ============================================================================


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def get_repo_root(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip()).resolve()

    def get_git_dir(self, cwd: Path) -> Path | None:
        result = subprocess.run(
            ["git", "rev-parse", "--git-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        git_dir = Path(result.stdout.strip())
        if not git_dir.is_absolute():
            git_dir = cwd / git_dir

        return git_dir.resolve()

    def is_merge_in_progress(self, repo_root: Path) -> bool:
        git_dir = self.get_git_dir(repo_root)
        if git_dir is None:
            return False
        return (git_dir / "MERGE_HEAD").exists()

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch."""
        result = subprocess.run(
            ["git", "branch", "--show-current"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        branch = result.stdout.strip()
        if not branch:
            return None

        return branch

    def list_remote_branches(self, repo_root: Path) -> list[str]:
        """List all remote branch names in the repository."""
        result = run_subprocess_with_context(
            ["git", "branch", "-r", "--format=%(refname:short)"],
            operation_context="list remote branches",
            cwd=repo_root,
        )
        return [line.strip() for line in result.stdout.strip().split("\n") if line.strip()]

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        return url or None

    def get_short_head(self, repo_root: Path) -> str:
        result = run_subprocess_with_context(
            ["git", "rev-parse", "--short", "HEAD"],
            operation_context="resolve HEAD",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def is_ancestor(self, repo_root: Path, ancestor: str, descendant: str) -> bool:
        result = subprocess.run(
            ["git", "merge-base", "--is-ancestor", ancestor, descendant],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def checkout_branch(self, repo_root: Path, branch: str) -> None:
        """Checkout a branch in the given directory."""
        run_subprocess_with_context(
            ["git", "checkout", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=repo_root,
        )

    def create_annotated_tag(self, repo_root: Path, name: str, message: str) -> None:
        run_subprocess_with_context(
            ["git", "tag", "-a", name, "-m", message],
            operation_context=f"create tag '{name}'",
            cwd=repo_root,
        )

    def list_commits(self, repo_root: Path, base: str) -> list[CommitInfo]:
        result = run_subprocess_with_context(
            [
                "git",
                "log",
                f"{base}..HEAD",
                "--no-merges",
                f"--pretty=format:%s{_FIELD_SEP}%h",
            ],
            operation_context=f"list commits since '{base}'",
            cwd=repo_root,
        )

        commits: list[CommitInfo] = []
        for line in result.stdout.splitlines():
            if _FIELD_SEP not in line:
                continue
            subject, short_hash = line.rsplit(_FIELD_SEP, 1)
            if not subject:
                continue
            commits.append(CommitInfo(subject=subject, short_hash=short_hash.strip()))
        return commits

    def get_diff_stat(self, repo_root: Path, base: str) -> str:
        result = subprocess.run(
            ["git", "diff", "--stat", f"{base}...HEAD"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return ""
        return result.stdout.rstrip("\n")

    def get_last_commit_subject(self, repo_root: Path) -> str:
        result = run_subprocess_with_context(
            ["git", "log", "-1", "--pretty=%s"],
            operation_context="read last commit subject",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def is_tracked(self, repo_root: Path, path: Path) -> bool:
        result = subprocess.run(
            ["git", "ls-files", "--error-unmatch", "--", str(path)],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def has_local_modifications(self, repo_root: Path, path: Path) -> bool:
        result = subprocess.run(
            ["git", "diff", "--quiet", "--", str(path)],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode != 0

    def stage_paths(self, repo_root: Path, paths: list[Path]) -> None:
        if not paths:
            return
        run_subprocess_with_context(
            ["git", "add", "-A", "--", *[str(p) for p in paths]],
            operation_context="stage files",
            cwd=repo_root,
        )

    def has_staged_changes(self, repo_root: Path) -> bool:
        """Check if the repository has staged changes."""
        result = subprocess.run(
            ["git", "diff", "--cached", "--quiet"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode in (0, 1):
            return result.returncode == 1
        result.check_returncode()
        return False

    def commit(self, repo_root: Path, message: str) -> None:
        run_subprocess_with_context(
            ["git", "commit", "-m", message],
            operation_context="create commit",
            cwd=repo_root,
        )

    def amend_commit(self, repo_root: Path) -> None:
        run_subprocess_with_context(
            ["git", "commit", "--amend", "--no-edit"],
            operation_context="amend commit",
            cwd=repo_root,
        )

    def is_worktree_clean(self, repo_root: Path) -> bool:
        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return True
        return not result.stdout.strip()

    def push(self, repo_root: Path, remote: str | None, branch: str | None) -> None:
        cmd = ["git", "push"]
        if remote is not None:
            cmd.append(remote)
            if branch is not None:
                cmd.append(branch)
        run_subprocess_with_context(
            cmd,
            operation_context=f"push {branch or 'current branch'}",
            cwd=repo_root,
        )

    def pull_branch(self, repo_root: Path, remote: str, branch: str) -> bool:
        result = subprocess.run(
            ["git", "pull", remote, branch],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def merge_branch(
        self, repo_root: Path, branch: str, *, message: str, prefer_theirs: bool
    ) -> MergeResult:
        cmd = ["git", "merge", "--no-ff"]
        if prefer_theirs:
            cmd.append("--strategy-option=theirs")
        cmd.extend([branch, "-m", message])

        result = subprocess.run(
            cmd,
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        output = "\n".join(part for part in (result.stdout.strip(), result.stderr.strip()) if part)
        return MergeResult(success=result.returncode == 0, output=output)

    def list_conflicts(self, repo_root: Path) -> list[ConflictedPath]:
        result = run_subprocess_with_context(
            ["git", "status", "--porcelain=v2", "-z"],
            operation_context="list conflicted files",
            cwd=repo_root,
        )
        return parse_unmerged_entries(result.stdout)

    def get_unmerged_stages(self, repo_root: Path, path: str) -> set[int]:
        result = subprocess.run(
            ["git", "ls-files", "-u", "-z", "--", path],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return set()

        # Format: <mode> <sha1> <stage>\t<path>
        stages: set[int] = set()
        for record in result.stdout.split("\0"):
            if "\t" not in record:
                continue
            meta = record.split("\t", 1)[0].split()
            if len(meta) == 3 and meta[2].isdigit():
                stages.add(int(meta[2]))
        return stages

    def write_stage(self, repo_root: Path, path: str, stage: int) -> bool:
        result = subprocess.run(
            ["git", "show", f":{stage}:{path}"],
            cwd=repo_root,
            capture_output=True,
            check=False,
        )
        if result.returncode != 0:
            return False
        target = repo_root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(result.stdout)
        return True

    def checkout_theirs(self, repo_root: Path, path: str) -> bool:
        result = subprocess.run(
            ["git", "checkout", "--theirs", "--", path],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def remove_path(self, repo_root: Path, path: str) -> bool:
        result = subprocess.run(
            ["git", "rm", "-f", "--quiet", "--", path],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def add_path(self, repo_root: Path, path: str) -> bool:
        result = subprocess.run(
            ["git", "add", "--", path],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def restore_worktree(self, repo_root: Path) -> None:
        subprocess.run(
            ["git", "checkout", "--", "."],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )

    def clean_untracked(self, repo_root: Path) -> None:
        subprocess.run(
            ["git", "clean", "-fd"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
