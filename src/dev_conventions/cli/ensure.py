"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
with consistent, user-friendly error messages. All errors use red "Error:" prefix
for visual consistency.
"""

from typing import TYPE_CHECKING, NoReturn, TypeVar

import click

from dev_conventions.cli.output import user_output
from dev_conventions.core.repo_discovery import NoRepoSentinel, RepoContext

if TYPE_CHECKING:
    from dev_conventions.core.context import DevConventionsContext

T = TypeVar("T")


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def fail(error_message: str) -> NoReturn:
        """Output a styled error and exit with code 1.

        Raises:
            SystemExit: Always (with exit code 1)
        """
        user_output(click.style("Error: ", fg="red") + error_message)
        raise SystemExit(1)

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            Ensure.fail(error_message)

    @staticmethod
    def truthy(value: T, error_message: str) -> T:
        """Ensure value is truthy, otherwise output styled error and exit.

        Returns:
            The value unchanged if truthy

        Raises:
            SystemExit: If value is falsy (with exit code 1)
        """
        if not value:
            Ensure.fail(error_message)
        return value

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        This method provides type narrowing: it takes `T | None` and returns `T`.

        Example:
            >>> branch = Ensure.not_none(
            ...     ctx.git.get_current_branch(repo.root), "Not on a branch (detached HEAD)"
            ... )
        """
        if value is None:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)
        return value

    @staticmethod
    def in_repo(ctx: "DevConventionsContext") -> RepoContext:
        """Ensure the command runs inside a git repository.

        Returns:
            The discovered RepoContext

        Raises:
            SystemExit: If the context holds a NoRepoSentinel (with exit code 1)
        """
        if isinstance(ctx.repo, NoRepoSentinel):
            user_output(click.style("Error: ", fg="red") + ctx.repo.message)
            raise SystemExit(1)
        return ctx.repo
