"""Managed blocks inside git hook scripts.

A managed block starts at a marker comment and ends at the next line that is
exactly `fi`:

    # dev-conventions pre-push check
    if command -v dev-conventions &>/dev/null; then
        ...
    fi

Installing appends the block (creating an executable hook with a shebang if
none exists). Removing deletes the block and deletes the hook file when
nothing but the shebang is left, so a hook that existed before installation
gets its original content back.
"""

import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

SHEBANG = "#!/usr/bin/env bash"


class HookError(Exception):
    """Raised when hooks cannot be managed (e.g. no hooks directory)."""


@dataclass(frozen=True)
class ManagedHook:
    """A block dev-conventions owns inside a git hook."""

    hook_name: str
    marker: str
    body: str

    def block(self) -> str:
        return f"{self.marker}\n{self.body.strip()}\n"


class InstallOutcome(Enum):
    INSTALLED = "installed"
    APPENDED = "appended"
    ALREADY_INSTALLED = "already_installed"


class RemoveOutcome(Enum):
    NO_HOOK = "no_hook"
    NOT_MANAGED = "not_managed"
    BLOCK_REMOVED = "block_removed"
    FILE_REMOVED = "file_removed"


PRE_PUSH_LINT_HOOK = ManagedHook(
    hook_name="pre-push",
    marker="# dev-conventions pre-push check",
    body="""
if command -v dev-conventions &>/dev/null; then
    echo "Running dev-conventions lint..."
    dev-conventions lint --check || {
        echo "Lint check failed. Fix issues before pushing."
        exit 1
    }
fi
""",
)

PRE_COMMIT_CONTEXT_HOOK = ManagedHook(
    hook_name="pre-commit",
    marker="# dev-conventions context.md drift check",
    body="""
if command -v dev-conventions &>/dev/null; then
    dev-conventions check-context || {
        echo "context.md drift detected. Fix before committing." >&2
        exit 1
    }
fi
""",
)


def strip_managed_block(content: str, marker: str) -> str:
    """Remove the block starting at `marker` through the next `fi` line.

    A single blank line directly before the marker is removed with it.
    """
    lines = content.splitlines()
    try:
        start = next(i for i, line in enumerate(lines) if line.strip() == marker)
    except StopIteration:
        return content

    end = start
    while end < len(lines) and lines[end] != "fi":
        end += 1

    if start > 0 and not lines[start - 1].strip():
        start -= 1

    remaining = lines[:start] + lines[end + 1 :]
    return "\n".join(remaining) + "\n" if remaining else ""


def _only_boilerplate(content: str) -> bool:
    return all(not line.strip() or line.startswith("#!") for line in content.splitlines())


def install_hook(hooks_dir: Path, hook: ManagedHook) -> InstallOutcome:
    """Install the managed block into `hooks_dir/<hook_name>`.

    Raises:
        HookError: If the hooks directory does not exist
    """
    if not hooks_dir.is_dir():
        raise HookError("Not a git repository or .git/hooks not found")

    hook_file = hooks_dir / hook.hook_name
    if hook_file.exists():
        existing = hook_file.read_text(encoding="utf-8")
        if hook.marker in existing.splitlines():
            return InstallOutcome.ALREADY_INSTALLED
        separator = "" if existing.endswith("\n") else "\n"
        hook_file.write_text(f"{existing}{separator}\n{hook.block()}", encoding="utf-8")
        return InstallOutcome.APPENDED

    hook_file.write_text(f"{SHEBANG}\n\n{hook.block()}", encoding="utf-8")
    mode = hook_file.stat().st_mode
    hook_file.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return InstallOutcome.INSTALLED


def remove_hook(hooks_dir: Path, hook: ManagedHook) -> RemoveOutcome:
    hook_file = hooks_dir / hook.hook_name
    if not hook_file.exists():
        return RemoveOutcome.NO_HOOK

    content = hook_file.read_text(encoding="utf-8")
    if hook.marker not in content.splitlines():
        return RemoveOutcome.NOT_MANAGED

    remaining = strip_managed_block(content, hook.marker)
    if _only_boilerplate(remaining):
        hook_file.unlink()
        return RemoveOutcome.FILE_REMOVED

    hook_file.write_text(remaining, encoding="utf-8")
    return RemoveOutcome.BLOCK_REMOVED
