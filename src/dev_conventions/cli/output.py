"""Output utilities for CLI commands with clear intent.

user_output() is for messages meant for the operator and goes to stderr.
machine_output() is for data meant to be consumed by other programs and goes
to stdout.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text


def user_output(message: str = "", nl: bool = True) -> None:
    """Emit an operator-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Emit a machine-readable value to stdout."""
    click.echo(message, nl=nl)


def format_merge_summary(
    branch: str, target: str, merge_hash: str, changelog_name: str
) -> Panel:
    """Format the final summary box for a completed changelog merge.

    Example:
        >>> panel = format_merge_summary("feat-x", "main", "abc1234", "CHANGELOG-abc1234.md")
        >>> Console(stderr=True).print(panel)
    """
    lines = [
        Text(f"✓ {branch} -> {target} ({merge_hash})", style="green"),
        Text(""),
        Text(f"Changelog: {changelog_name}"),
        Text(f"Commit:    {merge_hash}"),
    ]
    return Panel(Text("\n").join(lines), title="Complete", border_style="green", padding=(1, 2))


def print_panel(panel: Panel) -> None:
    """Render a rich panel to stderr alongside the other operator output."""
    Console(stderr=True).print(panel)
