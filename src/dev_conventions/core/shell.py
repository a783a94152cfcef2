"""External tool detection and execution.

Lint, hook and menu code needs to know whether `shfmt`, `shellcheck` or `gum`
is installed and to run them with their output passed straight through to the
terminal. Keeping that behind an ABC lets tests simulate installed and missing
tools.
"""

import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path


class Shell(ABC):
    """Abstract interface for running external command-line tools."""

    @abstractmethod
    def get_installed_tool_path(self, tool_name: str) -> str | None:
        """Return the executable path for a tool, or None if it is not on PATH."""
        ...

    @abstractmethod
    def run_command(self, command: list[str], cwd: Path | None = None) -> int:
        """Run a command with inherited stdio and return its exit code."""
        ...

    @abstractmethod
    def run_interactive(self, command: list[str]) -> str | None:
        """Run a terminal UI command, capturing only its stdout.

        Returns the stripped stdout, or None if the command failed or was
        cancelled.
        """
        ...


class RealShell(Shell):
    """Production implementation using shutil.which and subprocess."""

    def get_installed_tool_path(self, tool_name: str) -> str | None:
        return shutil.which(tool_name)

    def run_command(self, command: list[str], cwd: Path | None = None) -> int:
        try:
            result = subprocess.run(command, cwd=cwd, check=False)
        except FileNotFoundError:
            return 127
        return result.returncode

    def run_interactive(self, command: list[str]) -> str | None:
        try:
            result = subprocess.run(command, stdout=subprocess.PIPE, text=True, check=False)
        except FileNotFoundError:
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()
