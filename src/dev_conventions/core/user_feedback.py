"""User-facing status lines with mode awareness."""

from abc import ABC, abstractmethod

import click

from dev_conventions.cli.output import user_output


def _format(symbol: str, message: str, color: str) -> str:
    return click.style(f"  {symbol} {message}", fg=color, bold=True)


class UserFeedback(ABC):
    """Provides leveled, colorized status lines for the operator.

    This abstraction keeps a 'quiet' boolean out of every function signature.
    Functions call ctx.feedback methods, and the implementation chosen at
    startup decides what is shown.

    Usage:
        ctx.feedback.info("Merging feat-x into main...")
        ctx.feedback.warn("Working tree has uncommitted changes after merge")
        ctx.feedback.error("Merge conflicts detected")

    Mode behavior:
        Interactive (default):
            - every level is written to stderr
        Quiet (--quiet):
            - info(), detail() and success() are suppressed
            - warn() and error() are still written
    """

    @abstractmethod
    def info(self, message: str) -> None:
        """Progress message (`  → message`, green)."""

    @abstractmethod
    def detail(self, message: str) -> None:
        """Indented secondary line (`    message`, cyan)."""

    @abstractmethod
    def success(self, message: str) -> None:
        """Completion message (`  ✓ message`, green)."""

    @abstractmethod
    def warn(self, message: str) -> None:
        """Non-fatal problem (`  ⚠ message`, yellow). Always shown."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Fatal problem (`  ✗ message`, red). Always shown."""


class InteractiveFeedback(UserFeedback):
    """Feedback shown in interactive mode (all messages)."""

    def info(self, message: str) -> None:
        user_output(_format("→", message, "green"))

    def detail(self, message: str) -> None:
        user_output(click.style(f"    {message}", fg="cyan"))

    def success(self, message: str) -> None:
        user_output(_format("✓", message, "green"))

    def warn(self, message: str) -> None:
        user_output(_format("⚠", message, "yellow"))

    def error(self, message: str) -> None:
        user_output(_format("✗", message, "red"))


class SuppressedFeedback(UserFeedback):
    """Feedback for --quiet mode (only warnings and errors shown)."""

    def info(self, message: str) -> None:
        pass

    def detail(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warn(self, message: str) -> None:
        user_output(_format("⚠", message, "yellow"))

    def error(self, message: str) -> None:
        user_output(_format("✗", message, "red"))
