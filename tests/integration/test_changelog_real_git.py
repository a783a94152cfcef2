"""Integration tests running `dev-conventions changelog` against real git repositories.

Each test builds a repository with a bare `origin`, a `main` branch and a
`feat-x` branch, then drives the command with scripted prompt answers.
"""

import subprocess
from datetime import UTC, datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from dev_conventions.cli.cli import cli
from dev_conventions.cli.config import LoadedConfig
from dev_conventions.core.changelog.render import PENDING_CHANGELOG_NAME
from dev_conventions.core.changelog.state import STATE_FILE_NAME
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.git.real import RealGit
from dev_conventions.core.prompt import Prompter
from dev_conventions.core.repo_discovery import RepoContext
from tests.fakes.prompter import FakePrompter
from tests.fakes.remote_files import FakeRemoteFiles
from tests.fakes.shell import FakeShell
from tests.fakes.time import FakeTime
from tests.fakes.user_feedback import FakeUserFeedback

pytestmark = pytest.mark.integration

BACKUP_TAG = "main-20240115-103000"


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


def _commit_file(repo: Path, name: str, content: str, message: str) -> None:
    (repo / name).write_text(content, encoding="utf-8")
    _git(repo, "add", name)
    _git(repo, "commit", "-m", message)


def _init_repo(tmp_path: Path) -> Path:
    origin = tmp_path / "origin.git"
    subprocess.run(
        ["git", "init", "--bare", "-b", "main", str(origin)], check=True, capture_output=True
    )

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-b", "main")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")
    _git(repo, "config", "commit.gpgsign", "false")
    _git(repo, "config", "tag.gpgsign", "false")
    _git(repo, "config", "pull.rebase", "false")
    _git(repo, "remote", "add", "origin", str(origin))

    _commit_file(repo, "README.md", "# Project\n", "Initial commit")
    _git(repo, "push", "-u", "origin", "main")
    return repo


def _context(
    repo: Path, prompter: Prompter | None = None, time: FakeTime | None = None
) -> DevConventionsContext:
    return DevConventionsContext(
        git=RealGit(),
        shell=FakeShell(),
        prompter=prompter if prompter is not None else FakePrompter(),
        feedback=FakeUserFeedback(),
        remote_files=FakeRemoteFiles(),
        time=time if time is not None else FakeTime(),
        cwd=repo,
        repo=RepoContext(root=repo, git_dir=repo / ".git"),
        config=LoadedConfig.defaults(),
    )


def _conflicting_repo(tmp_path: Path) -> tuple[Path, str]:
    """feat-x and main both change README.md. Returns (repo, main commit before merge)."""
    repo = _init_repo(tmp_path)
    _git(repo, "checkout", "-b", "feat-x")
    _commit_file(repo, "README.md", "# Project\n\nfeature text\n", "feat: describe feature")

    _git(repo, "checkout", "main")
    _commit_file(repo, "README.md", "# Project\n\nmain text\n", "docs: main edit")
    _git(repo, "push", "origin", "main")
    main_sha = _git(repo, "rev-parse", "HEAD")

    _git(repo, "checkout", "feat-x")
    return repo, main_sha


def test_clean_merge_renames_and_amends_changelog(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path)
    _git(repo, "checkout", "-b", "feat-x")
    _commit_file(repo, "a.txt", "a\n", "feat: add a")
    _commit_file(repo, "b.txt", "b\n", "feat: add b")

    result = CliRunner().invoke(
        cli, ["changelog", "--yes", "--theirs", "--target", "main"], obj=_context(repo)
    )

    assert result.exit_code == 0, result.output
    assert _git(repo, "branch", "--show-current") == "main"
    assert _git(repo, "log", "-1", "--pretty=%s") == "Merge branch 'feat-x' into main"
    assert not (repo / STATE_FILE_NAME).exists()
    assert not (repo / PENDING_CHANGELOG_NAME).exists()

    changelogs = sorted(repo.glob("CHANGELOG-*.md"))
    assert len(changelogs) == 1
    content = changelogs[0].read_text(encoding="utf-8")
    assert "- feat: add b" in content
    assert "- feat: add a" in content
    assert content.index("feat: add b") < content.index("feat: add a")

    # The changelog is part of the merge commit itself
    committed = _git(repo, "diff", "--name-only", "HEAD^1", "HEAD")
    assert changelogs[0].name in committed.splitlines()
    assert _git(repo, "status", "--porcelain") == ""
    assert _git(repo, "rev-parse", "main") == _git(repo, "rev-parse", "origin/main")


def test_conflict_with_wrong_phrase_leaves_merge_for_manual_resolution(tmp_path: Path) -> None:
    repo, main_sha = _conflicting_repo(tmp_path)
    prompter = FakePrompter(
        confirm_responses=[True, True], choose_responses=["force"], ask_responses=["nope"]
    )

    result = CliRunner().invoke(
        cli, ["changelog", "--target", "main"], obj=_context(repo, prompter)
    )

    assert result.exit_code == 1
    assert "README.md (both modified)" in result.output
    assert f"git reset --hard {BACKUP_TAG}" in result.output
    assert _git(repo, "diff", "--name-only", "--diff-filter=U") == "README.md"
    assert _git(repo, "rev-parse", f"{BACKUP_TAG}^{{commit}}") == main_sha
    assert "STAGE=merged" not in (repo / STATE_FILE_NAME).read_text(encoding="utf-8")


def test_conflict_forced_with_phrase_prefers_incoming(tmp_path: Path) -> None:
    repo, main_sha = _conflicting_repo(tmp_path)
    prompter = FakePrompter(
        confirm_responses=[True, True],
        choose_responses=["force"],
        ask_responses=["I understand"],
    )

    result = CliRunner().invoke(
        cli, ["changelog", "--target", "main"], obj=_context(repo, prompter)
    )

    assert result.exit_code == 0, result.output
    assert (repo / "README.md").read_text(encoding="utf-8") == "# Project\n\nfeature text\n"
    assert _git(repo, "log", "-1", "--pretty=%s") == (
        "Merge branch 'feat-x' into main (force theirs)"
    )
    assert _git(repo, "diff", "--name-only", "--diff-filter=U") == ""
    assert len(list(repo.glob("CHANGELOG-*.md"))) == 1
    assert not (repo / STATE_FILE_NAME).exists()
    assert _git(repo, "rev-parse", f"{BACKUP_TAG}^{{commit}}") == main_sha


def test_resume_after_manual_resolution(tmp_path: Path) -> None:
    """After resolving by hand and committing, 'continue' finishes the workflow."""
    repo, _ = _conflicting_repo(tmp_path)
    first = CliRunner().invoke(
        cli,
        ["changelog", "--target", "main"],
        obj=_context(repo, FakePrompter(confirm_responses=[True, True])),
    )
    assert first.exit_code == 1

    (repo / "README.md").write_text("# Project\n\nresolved\n", encoding="utf-8")
    _git(repo, "add", "README.md")
    _git(repo, "commit", "--no-edit")

    second = CliRunner().invoke(
        cli,
        ["changelog"],
        obj=_context(repo, FakePrompter(choose_responses=["continue"])),
    )

    assert second.exit_code == 0, second.output
    assert not (repo / STATE_FILE_NAME).exists()
    assert not (repo / PENDING_CHANGELOG_NAME).exists()
    assert len(list(repo.glob("CHANGELOG-*.md"))) == 1
    assert _git(repo, "tag", "--list", "main-*") == BACKUP_TAG


def test_second_cycle_moves_previous_changelog_into_archive(tmp_path: Path) -> None:
    repo = _init_repo(tmp_path)
    _git(repo, "checkout", "-b", "feat-x")
    _commit_file(repo, "a.txt", "a\n", "feat: add a")
    first = CliRunner().invoke(
        cli, ["changelog", "--yes", "--target", "main"], obj=_context(repo)
    )
    assert first.exit_code == 0, first.output
    (first_changelog,) = repo.glob("CHANGELOG-*.md")

    _git(repo, "checkout", "-b", "feat-y")
    _commit_file(repo, "b.txt", "b\n", "feat: add b")
    later = FakeTime(datetime(2024, 1, 16, 9, 0, 0, tzinfo=UTC))
    second = CliRunner().invoke(
        cli, ["changelog", "--yes", "--target", "main"], obj=_context(repo, time=later)
    )

    assert second.exit_code == 0, second.output
    assert "uncommitted changes" not in second.output
    assert _git(repo, "status", "--porcelain") == ""
    tracked_root = _git(repo, "ls-files", "CHANGELOG-*.md").splitlines()
    assert len(tracked_root) == 1
    assert first_changelog.name not in tracked_root
    assert _git(repo, "ls-files", "changelog_archive").splitlines() == [
        f"changelog_archive/{first_changelog.name}"
    ]
