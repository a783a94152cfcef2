"""Target branch selection for the changelog command."""

import logging
from pathlib import Path

from dev_conventions.cli.constants import CONVENTIONAL_TARGET_BRANCHES
from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import user_output
from dev_conventions.core.context import DevConventionsContext

logger = logging.getLogger(__name__)

QUIT_REPLIES = ("q", "quit", "exit")


def list_target_candidates(remote_branches: list[str]) -> list[str]:
    """Conventional branch names present on origin, sorted and unique.

    Example:
        >>> list_target_candidates(["origin/main", "origin/feat-x", "origin/dev"])
        ['dev', 'main']
    """
    names = {
        branch.removeprefix("origin/")
        for branch in remote_branches
        if branch.startswith("origin/")
    }
    return sorted(name for name in names if name in CONVENTIONAL_TARGET_BRANCHES)


def pick_default_target(candidates: list[str], configured: str | None) -> str:
    """Configured default if offered, else main, else master, else the first candidate."""
    if configured is not None and configured in candidates:
        return configured
    for preferred in ("main", "master"):
        if preferred in candidates:
            return preferred
    if candidates:
        return candidates[0]
    return "main"


def select_target(ctx: DevConventionsContext, repo_root: Path, explicit: str | None) -> str:
    """Resolve the branch to merge into.

    An explicit target is used verbatim. Otherwise the operator picks from a
    numbered menu of conventional remote branches, by number or by name.

    Raises:
        SystemExit: On quit (exit code 0) or an out-of-range number (exit code 1)
    """
    if explicit is not None:
        return explicit

    candidates = list_target_candidates(ctx.git.list_remote_branches(repo_root))
    default = pick_default_target(candidates, ctx.config.default_target)
    logger.debug("Target candidates: %s (default %s)", candidates, default)

    user_output()
    user_output("Available branches:")
    for number, name in enumerate(candidates, start=1):
        suffix = " (default)" if name == default else ""
        user_output(f"  {number}) {name}{suffix}")
    user_output()

    reply = ctx.prompter.ask("Target branch number or name (q to quit):", default=default)
    reply = reply.strip() or default

    if reply.lower() in QUIT_REPLIES:
        ctx.feedback.info("Aborted")
        raise SystemExit(0)

    if reply.isdigit():
        index = int(reply) - 1
        Ensure.invariant(0 <= index < len(candidates), f"Invalid branch number: {reply}")
        return candidates[index]

    return reply
