"""Formatting and static analysis of shell scripts via shfmt and shellcheck."""

import logging
from enum import Enum
from pathlib import Path

from dev_conventions.core.shell import Shell
from dev_conventions.core.user_feedback import UserFeedback

logger = logging.getLogger(__name__)

SHFMT_INSTALL_URL = "https://github.com/mvdan/sh"
SHELLCHECK_INSTALL_URL = "https://www.shellcheck.net/"
EXCLUDED_DIRS = frozenset({".git", "node_modules"})


class LintMode(Enum):
    CHECK = "check"
    FORMAT = "format"
    FIX = "fix"

    @property
    def writes_files(self) -> bool:
        return self is not LintMode.CHECK


def find_shell_scripts(root: Path) -> list[Path]:
    """All *.sh files under `root`, skipping .git and node_modules, sorted."""
    scripts = [
        path
        for path in root.rglob("*.sh")
        if path.is_file() and not EXCLUDED_DIRS.intersection(path.relative_to(root).parts)
    ]
    return sorted(scripts)


def _display(path: Path, root: Path) -> str:
    if path.is_relative_to(root):
        return str(path.relative_to(root))
    return str(path)


def run_shfmt(
    shell: Shell, feedback: UserFeedback, files: list[Path], mode: LintMode, root: Path
) -> bool:
    """Check (`shfmt -d`) or rewrite (`shfmt -w`) each file.

    Returns:
        True if shfmt is installed and every file passed or was formatted
    """
    if shell.get_installed_tool_path("shfmt") is None:
        feedback.error(f"shfmt not found. Install: {SHFMT_INSTALL_URL}")
        return False

    ok = True
    for path in files:
        name = _display(path, root)
        if mode.writes_files:
            if shell.run_command(["shfmt", "-w", str(path)], cwd=root) == 0:
                feedback.detail(f"Formatted: {name}")
            else:
                feedback.warn(f"Could not format: {name}")
                ok = False
        elif shell.run_command(["shfmt", "-d", str(path)], cwd=root) != 0:
            feedback.warn(f"Needs formatting: {name}")
            ok = False
    return ok


def run_shellcheck(shell: Shell, feedback: UserFeedback, files: list[Path], root: Path) -> bool:
    """Run shellcheck on each file.

    Returns:
        True if shellcheck is installed and reported no issues
    """
    if shell.get_installed_tool_path("shellcheck") is None:
        feedback.error(f"shellcheck not found. Install: {SHELLCHECK_INSTALL_URL}")
        return False

    ok = True
    for path in files:
        name = _display(path, root)
        if shell.run_command(["shellcheck", str(path)], cwd=root) == 0:
            feedback.detail(f"OK: {name}")
        else:
            feedback.warn(f"Issues found in: {name}")
            ok = False
    logger.debug("shellcheck finished: ok=%s", ok)
    return ok
