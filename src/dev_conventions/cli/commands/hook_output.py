"""Operator messages for hook install/remove, shared by lint and check-context."""

from pathlib import Path

from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.hooks import InstallOutcome, ManagedHook, RemoveOutcome


def report_install(
    ctx: DevConventionsContext, hook: ManagedHook, outcome: InstallOutcome, hooks_dir: Path
) -> None:
    hook_file = hooks_dir / hook.hook_name
    match outcome:
        case InstallOutcome.ALREADY_INSTALLED:
            ctx.feedback.info(f"{hook.hook_name} hook already installed")
        case InstallOutcome.APPENDED:
            ctx.feedback.warn(
                f"Existing {hook.hook_name} hook found. Appended dev-conventions check."
            )
            ctx.feedback.info(f"Installed {hook.hook_name} hook: {hook_file}")
        case InstallOutcome.INSTALLED:
            ctx.feedback.info(f"Installed {hook.hook_name} hook: {hook_file}")


def report_remove(ctx: DevConventionsContext, hook: ManagedHook, outcome: RemoveOutcome) -> None:
    match outcome:
        case RemoveOutcome.NO_HOOK:
            ctx.feedback.info(f"No {hook.hook_name} hook found")
        case RemoveOutcome.NOT_MANAGED:
            ctx.feedback.info(f"{hook.hook_name} hook exists but is not managed by dev-conventions")
        case RemoveOutcome.FILE_REMOVED:
            ctx.feedback.info(f"Removed {hook.hook_name} hook (was only dev-conventions)")
        case RemoveOutcome.BLOCK_REMOVED:
            ctx.feedback.info(f"Removed dev-conventions section from {hook.hook_name} hook")
