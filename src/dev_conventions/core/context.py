"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

import click

from dev_conventions.cli.config import ConfigError, LoadedConfig, load_config
from dev_conventions.cli.constants import CONFIG_DIR_NAME
from dev_conventions.cli.output import user_output
from dev_conventions.core.git.abc import Git
from dev_conventions.core.git.real import RealGit
from dev_conventions.core.prompt import InteractivePrompter, Prompter
from dev_conventions.core.remote_files import GitHubRemoteFiles, RemoteFiles
from dev_conventions.core.repo_discovery import (
    NoRepoSentinel,
    RepoContext,
    discover_repo_or_sentinel,
)
from dev_conventions.core.shell import RealShell, Shell
from dev_conventions.core.time.abc import Time
from dev_conventions.core.time.real import RealTime
from dev_conventions.core.user_feedback import (
    InteractiveFeedback,
    SuppressedFeedback,
    UserFeedback,
)


@dataclass(frozen=True)
class DevConventionsContext:
    """Immutable context holding all dependencies for dev-conventions operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime; commands that need a
    different capability (e.g. --yes) derive a new context with
    dataclasses.replace().
    """

    git: Git
    shell: Shell
    prompter: Prompter
    feedback: UserFeedback
    remote_files: RemoteFiles
    time: Time
    cwd: Path  # Current working directory at CLI invocation
    repo: RepoContext | NoRepoSentinel
    config: LoadedConfig

    @property
    def project_root(self) -> Path:
        """Repository root, or cwd when running outside a repository."""
        if isinstance(self.repo, RepoContext):
            return self.repo.root
        return self.cwd

    @staticmethod
    def for_test(
        git: Git | None = None,
        shell: Shell | None = None,
        prompter: Prompter | None = None,
        feedback: UserFeedback | None = None,
        remote_files: RemoteFiles | None = None,
        time: Time | None = None,
        cwd: Path | None = None,
        repo: RepoContext | NoRepoSentinel | None = None,
        config: LoadedConfig | None = None,
    ) -> "DevConventionsContext":
        """Create test context with optional pre-configured integration classes.

        Any unspecified integration gets its empty fake. When `repo` is not
        given, a RepoContext rooted at `cwd` is used so commands that require
        a repository work out of the box.

        Example:
            >>> git = FakeGit(repo_root=repo_root, current_branch="feat-x")
            >>> ctx = DevConventionsContext.for_test(git=git, cwd=repo_root)
        """
        from tests.fakes.git import FakeGit
        from tests.fakes.prompter import FakePrompter
        from tests.fakes.remote_files import FakeRemoteFiles
        from tests.fakes.shell import FakeShell
        from tests.fakes.time import FakeTime
        from tests.fakes.user_feedback import FakeUserFeedback

        if cwd is None:
            cwd = Path("/test/default/cwd")

        if repo is None:
            repo = RepoContext(root=cwd, git_dir=cwd / ".git")

        return DevConventionsContext(
            git=git if git is not None else FakeGit(),
            shell=shell if shell is not None else FakeShell(),
            prompter=prompter if prompter is not None else FakePrompter(),
            feedback=feedback if feedback is not None else FakeUserFeedback(),
            remote_files=remote_files if remote_files is not None else FakeRemoteFiles(),
            time=time if time is not None else FakeTime(),
            cwd=cwd,
            repo=repo,
            config=config if config is not None else LoadedConfig.defaults(),
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        tuple[Path | None, str | None]: (path, error_message)
        - If successful: (Path, None)
        - If directory deleted: (None, error_message)
    """
    try:
        cwd_path = Path.cwd()
        return (cwd_path, None)
    except (FileNotFoundError, OSError):
        return (
            None,
            "Current working directory no longer exists",
        )


def create_context(*, quiet: bool = False) -> DevConventionsContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        quiet: If True, use SuppressedFeedback so only warnings and errors
               are printed

    Returns:
        DevConventionsContext with real implementations
    """
    # 1. Capture cwd (no deps)
    cwd_result, error_msg = safe_cwd()
    if cwd_result is None:
        assert error_msg is not None
        user_output(click.style("Error: ", fg="red") + error_msg)
        user_output("\nThe directory you're running from has been deleted.")
        user_output("Please change to a valid directory and try again.")
        raise SystemExit(1)

    cwd = cwd_result

    # 2. Create integration classes (need git for repo discovery)
    git: Git = RealGit()
    shell: Shell = RealShell()

    # 3. Discover repo
    repo = discover_repo_or_sentinel(cwd, git)

    # 4. Load repo config (or defaults if no repo)
    if isinstance(repo, NoRepoSentinel):
        config = LoadedConfig.defaults()
    else:
        try:
            config = load_config(repo.root / CONFIG_DIR_NAME)
        except ConfigError as e:
            user_output(click.style("Error: ", fg="red") + str(e))
            raise SystemExit(1) from e

    # 5. Choose feedback implementation based on mode
    prompter: Prompter = InteractivePrompter(shell)

    feedback: UserFeedback
    if quiet:
        feedback = SuppressedFeedback()
    else:
        feedback = InteractiveFeedback()

    # 6. Create context with all values
    return DevConventionsContext(
        git=git,
        shell=shell,
        prompter=prompter,
        feedback=feedback,
        remote_files=GitHubRemoteFiles(),
        time=RealTime(),
        cwd=cwd,
        repo=repo,
        config=config,
    )
