"""Tests for the checks `dev-conventions changelog` runs before doing any work."""

from pathlib import Path

from click.testing import CliRunner

from dev_conventions.cli.cli import cli
from dev_conventions.core.changelog.render import PENDING_CHANGELOG_NAME
from dev_conventions.core.changelog.state import STATE_FILE_NAME
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.git.abc import CommitInfo
from dev_conventions.core.repo_discovery import NoRepoSentinel
from tests.fakes.git import FakeGit
from tests.fakes.prompter import FakePrompter

STATE = "BRANCH=feat-x\nTARGET=main\nHEAD=abc1234\nSTAGE=changelog_committed\n"


def test_outside_repository_fails() -> None:
    ctx = DevConventionsContext.for_test(repo=NoRepoSentinel())

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 1
    assert "Not inside a git repository" in result.output


def test_detached_head_fails(tmp_path: Path) -> None:
    ctx = DevConventionsContext.for_test(git=FakeGit(current_branch=None), cwd=tmp_path)

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 1
    assert "Cannot generate changelog in detached HEAD state" in result.output


def test_merge_in_progress_wins_over_state_file(tmp_path: Path) -> None:
    """A git-level merge is reported before any state menu is offered."""
    (tmp_path / STATE_FILE_NAME).write_text(STATE, encoding="utf-8")
    prompter = FakePrompter()
    ctx = DevConventionsContext.for_test(
        git=FakeGit(current_branch="feat-x", merge_in_progress=True),
        prompter=prompter,
        cwd=tmp_path,
    )

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 1
    assert "A git merge is in progress" in result.output
    assert prompter.menus == []


def test_stale_state_abort_leaves_repository_untouched(tmp_path: Path) -> None:
    """Aborting the stale-state menu twice offers the same choice both times."""
    (tmp_path / STATE_FILE_NAME).write_text(STATE, encoding="utf-8")
    (tmp_path / PENDING_CHANGELOG_NAME).write_text("pending", encoding="utf-8")
    runner = CliRunner()

    for _ in range(2):
        prompter = FakePrompter()
        ctx = DevConventionsContext.for_test(
            git=FakeGit(current_branch="feat-x"), prompter=prompter, cwd=tmp_path
        )

        result = runner.invoke(cli, ["changelog"], obj=ctx)

        assert result.exit_code == 0
        assert prompter.menus == [("Stale merge state found", ["remove", "continue", "abort"])]
        assert (tmp_path / STATE_FILE_NAME).read_text(encoding="utf-8") == STATE
        assert (tmp_path / PENDING_CHANGELOG_NAME).exists()


def test_unreadable_state_cannot_be_continued(tmp_path: Path) -> None:
    (tmp_path / STATE_FILE_NAME).write_text("BRANCH=feat-x\nSTAGE=bogus\n", encoding="utf-8")
    prompter = FakePrompter()
    ctx = DevConventionsContext.for_test(
        git=FakeGit(current_branch="feat-x"), prompter=prompter, cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 0
    assert prompter.menus == [("Stale merge state found", ["remove", "abort"])]


def test_stale_state_remove_starts_fresh(tmp_path: Path) -> None:
    (tmp_path / STATE_FILE_NAME).write_text(STATE, encoding="utf-8")
    (tmp_path / PENDING_CHANGELOG_NAME).write_text("pending", encoding="utf-8")
    prompter = FakePrompter(choose_responses=["remove"])
    git = FakeGit(current_branch="feat-x")
    ctx = DevConventionsContext.for_test(git=git, prompter=prompter, cwd=tmp_path)

    result = CliRunner().invoke(cli, ["changelog", "--target", "main"], obj=ctx)

    # Fresh start finds no commits in the range
    assert result.exit_code == 1
    assert "No new commits relative to main" in result.output
    assert not (tmp_path / STATE_FILE_NAME).exists()
    assert not (tmp_path / PENDING_CHANGELOG_NAME).exists()


def test_orphaned_changelog_abort(tmp_path: Path) -> None:
    (tmp_path / PENDING_CHANGELOG_NAME).write_text("pending", encoding="utf-8")
    prompter = FakePrompter()
    ctx = DevConventionsContext.for_test(
        git=FakeGit(current_branch="feat-x"), prompter=prompter, cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 0
    assert prompter.menus == [("Pending changelog found", ["remove", "complete", "abort"])]
    assert (tmp_path / PENDING_CHANGELOG_NAME).exists()


def test_orphaned_changelog_complete_amends_merge_commit(tmp_path: Path) -> None:
    (tmp_path / PENDING_CHANGELOG_NAME).write_text(
        "# Changelog -- feat-x -> main\n**HEAD:** `pending` (rename after merge)\n",
        encoding="utf-8",
    )
    git = FakeGit(
        current_branch="main",
        head="def5678",
        last_commit_subject="Merge branch 'feat-x' into main",
    )
    ctx = DevConventionsContext.for_test(
        git=git, prompter=FakePrompter(choose_responses=["complete"]), cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 0
    final = tmp_path / "CHANGELOG-def5678.md"
    assert final.exists()
    assert "**HEAD:** `def5678`" in final.read_text(encoding="utf-8")
    assert git.amend_count == 1
    assert git.commit_messages == []


def test_orphaned_changelog_complete_commits_when_head_is_not_a_merge(tmp_path: Path) -> None:
    (tmp_path / PENDING_CHANGELOG_NAME).write_text("pending", encoding="utf-8")
    git = FakeGit(current_branch="main", head="def5678", last_commit_subject="fix: typo")
    ctx = DevConventionsContext.for_test(
        git=git, prompter=FakePrompter(choose_responses=["complete"]), cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 0
    assert git.commit_messages == ["docs(changelog): add changelog for merge (def5678)"]


def test_target_menu_quit(tmp_path: Path) -> None:
    git = FakeGit(current_branch="feat-x", remote_branches=["origin/main", "origin/dev"])
    prompter = FakePrompter(ask_responses=["q"])
    ctx = DevConventionsContext.for_test(git=git, prompter=prompter, cwd=tmp_path)

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 0
    assert "Available branches:" in result.output
    assert "2) main (default)" in result.output
    assert not (tmp_path / PENDING_CHANGELOG_NAME).exists()


def test_target_menu_rejects_out_of_range_number(tmp_path: Path) -> None:
    git = FakeGit(current_branch="feat-x", remote_branches=["origin/main"])
    ctx = DevConventionsContext.for_test(
        git=git, prompter=FakePrompter(ask_responses=["9"]), cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["changelog"], obj=ctx)

    assert result.exit_code == 1
    assert "Invalid branch number: 9" in result.output


def test_target_menu_accepts_number(tmp_path: Path) -> None:
    git = FakeGit(
        current_branch="feat-x",
        remote_branches=["origin/main", "origin/dev"],
        commits={"dev": [CommitInfo("feat: a", "aaa1111")]},
    )
    ctx = DevConventionsContext.for_test(
        git=git, prompter=FakePrompter(ask_responses=["1"]), cwd=tmp_path
    )

    result = CliRunner().invoke(cli, ["changelog", "--generate-only"], obj=ctx)

    # generate confirmation defaults to no
    assert result.exit_code == 0
    assert "Found 1 commits to include in changelog" in result.output
    assert not (tmp_path / PENDING_CHANGELOG_NAME).exists()


def test_already_on_target_fails(tmp_path: Path) -> None:
    ctx = DevConventionsContext.for_test(git=FakeGit(current_branch="main"), cwd=tmp_path)

    result = CliRunner().invoke(cli, ["changelog", "--target", "main"], obj=ctx)

    assert result.exit_code == 1
    assert "Already on main, switch to feature branch" in result.output


def test_zero_commits_creates_nothing(tmp_path: Path) -> None:
    ctx = DevConventionsContext.for_test(git=FakeGit(current_branch="feat-x"), cwd=tmp_path)

    result = CliRunner().invoke(cli, ["changelog", "--target", "main", "--yes"], obj=ctx)

    assert result.exit_code == 1
    assert "No new commits relative to main" in result.output
    assert not (tmp_path / PENDING_CHANGELOG_NAME).exists()
    assert not (tmp_path / STATE_FILE_NAME).exists()
    assert not (tmp_path / ".gitignore").exists()
