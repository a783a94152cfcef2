"""Operator prompts with a capability chosen once at startup.

Two implementations:
- InteractivePrompter: asks on the terminal (menus through `gum` when it is
  installed, otherwise a numbered list).
- AutoConfirmPrompter: never asks. Confirmations are accepted, free-text
  questions and menus resolve to their defaults. Selected by --yes.

Workflow code never checks which one it has; it states the default for every
question and lets the prompter decide.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import click

from dev_conventions.core.shell import Shell


@dataclass(frozen=True)
class MenuOption:
    """One entry of a choice menu: a short key and its description."""

    key: str
    description: str


class Prompter(ABC):
    """Abstract interface for operator prompts."""

    @abstractmethod
    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask a yes/no question."""
        ...

    @abstractmethod
    def ask(self, message: str, *, default: str = "") -> str:
        """Ask for a line of free text. Returns `default` on empty input."""
        ...

    @abstractmethod
    def choose(self, header: str, options: list[MenuOption], *, default: str) -> str | None:
        """Offer a menu and return the selected key.

        Returns None when the selection is cancelled or invalid.
        """
        ...


class InteractivePrompter(Prompter):
    """Prompter that reads answers from the terminal."""

    def __init__(self, shell: Shell) -> None:
        self._shell = shell

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return click.confirm(
            click.style(f"  ? {message}", fg="cyan", bold=True), default=default, err=True
        )

    def ask(self, message: str, *, default: str = "") -> str:
        answer = click.prompt(
            click.style(f"  ? {message}", fg="cyan", bold=True),
            default=default,
            show_default=bool(default),
            err=True,
        )
        return str(answer).strip()

    def choose(self, header: str, options: list[MenuOption], *, default: str) -> str | None:
        if self._shell.get_installed_tool_path("gum") is not None:
            lines = [f"{option.key:<9}{option.description}" for option in options]
            selected = self._shell.run_interactive(["gum", "choose", *lines, f"--header={header}"])
            if not selected:
                return None
            return selected.split()[0]

        click.echo(err=True)
        click.echo(header, err=True)
        for number, option in enumerate(options, start=1):
            click.echo(f"  {number}) {option.description}", err=True)
        click.echo(err=True)

        default_number = next(
            (str(n) for n, option in enumerate(options, start=1) if option.key == default), ""
        )
        reply = self.ask(f"Select option [1-{len(options)}]:", default=default_number)
        if not reply.isdigit():
            return None
        index = int(reply) - 1
        if not 0 <= index < len(options):
            return None
        return options[index].key


class AutoConfirmPrompter(Prompter):
    """Prompter for --yes: accepts confirmations and takes every default."""

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return True

    def ask(self, message: str, *, default: str = "") -> str:
        return default

    def choose(self, header: str, options: list[MenuOption], *, default: str) -> str | None:
        return default
