"""Fake implementation of Shell for testing.

This fake enables testing tool-dependent functionality without requiring
shfmt, shellcheck or gum to be installed.
"""

from pathlib import Path

from dev_conventions.core.shell import Shell


class FakeShell(Shell):
    """In-memory fake implementation of shell operations.

    Constructor Injection:
    - All state is provided via constructor parameters
    - No mutations occur (immutable after construction)

    Examples:
        # Test with shfmt installed and reporting a diff
        >>> shell = FakeShell(
        ...     installed_tools={"shfmt": "/usr/local/bin/shfmt"},
        ...     command_exit_codes={"shfmt": 1},
        ... )
        >>> shell.run_command(["shfmt", "-d", "a.sh"])
        1

        # Test with gum menu returning a selection
        >>> shell = FakeShell(
        ...     installed_tools={"gum": "/usr/local/bin/gum"},
        ...     interactive_response="version       Show version information",
        ... )
    """

    def __init__(
        self,
        *,
        installed_tools: dict[str, str] | None = None,
        command_exit_codes: dict[str, int] | None = None,
        interactive_response: str | None = None,
    ) -> None:
        """Initialize fake with predetermined tool availability.

        Args:
            installed_tools: Mapping of tool name to executable path. Tools not in
                this mapping will return None from get_installed_tool_path()
            command_exit_codes: Exit code per tool name for run_command().
                Tools not in this mapping exit 0
            interactive_response: Value returned from run_interactive()
        """
        self._installed_tools = installed_tools or {}
        self._command_exit_codes = command_exit_codes or {}
        self._interactive_response = interactive_response
        self._command_calls: list[tuple[list[str], Path | None]] = []
        self._interactive_calls: list[list[str]] = []

    def get_installed_tool_path(self, tool_name: str) -> str | None:
        """Return the tool path if configured, None otherwise."""
        return self._installed_tools.get(tool_name)

    def run_command(self, command: list[str], cwd: Path | None = None) -> int:
        """Track call to run_command and return the configured exit code."""
        self._command_calls.append((command, cwd))
        return self._command_exit_codes.get(command[0], 0)

    def run_interactive(self, command: list[str]) -> str | None:
        self._interactive_calls.append(command)
        return self._interactive_response

    @property
    def command_calls(self) -> list[tuple[list[str], Path | None]]:
        """Get the list of run_command() calls that were made.

        Returns list of (command, cwd) tuples.

        This property is for test assertions only.
        """
        return self._command_calls.copy()

    @property
    def interactive_calls(self) -> list[list[str]]:
        return self._interactive_calls.copy()
