from pathlib import Path

import click

from dev_conventions.cli.commands.hook_output import report_install, report_remove
from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import user_output
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.hooks import (
    PRE_PUSH_LINT_HOOK,
    HookError,
    install_hook,
    remove_hook,
)
from dev_conventions.core.linting import LintMode, find_shell_scripts, run_shellcheck, run_shfmt


def _resolve_files(root: Path, files: str | None) -> list[Path]:
    if files is None:
        return find_shell_scripts(root)
    return [root / item.strip() for item in files.split(",") if item.strip()]


@click.command("lint")
@click.option(
    "-c",
    "--check",
    "mode",
    flag_value=LintMode.CHECK.value,
    default=LintMode.CHECK.value,
    help="Check formatting without modifying files (default).",
)
@click.option(
    "-f",
    "--format",
    "mode",
    flag_value=LintMode.FORMAT.value,
    help="Format files in place, then run shellcheck.",
)
@click.option(
    "--fix",
    "mode",
    flag_value=LintMode.FIX.value,
    help="Same as --format.",
)
@click.option("--files", help="Comma-separated list of files (default: all *.sh in project).")
@click.option(
    "--install-hook", "install", is_flag=True, help="Install a pre-push hook running lint."
)
@click.option("--remove-hook", "remove", is_flag=True, help="Remove the pre-push hook.")
@click.pass_obj
def lint_cmd(
    ctx: DevConventionsContext,
    mode: str,
    files: str | None,
    install: bool,
    remove: bool,
) -> None:
    """Format and check shell scripts with shfmt and shellcheck."""
    Ensure.invariant(not (install and remove), "--install-hook and --remove-hook conflict")

    if install or remove:
        repo = Ensure.in_repo(ctx)
        if install:
            try:
                outcome = install_hook(repo.hooks_dir, PRE_PUSH_LINT_HOOK)
            except HookError as e:
                Ensure.fail(str(e))
            report_install(ctx, PRE_PUSH_LINT_HOOK, outcome, repo.hooks_dir)
        else:
            removed = remove_hook(repo.hooks_dir, PRE_PUSH_LINT_HOOK)
            report_remove(ctx, PRE_PUSH_LINT_HOOK, removed)
        return

    lint_mode = LintMode(mode)
    root = ctx.project_root
    scripts = _resolve_files(root, files)
    if not scripts:
        ctx.feedback.warn(f"No shell scripts found in {root}")
        return

    ctx.feedback.info(f"Found {len(scripts)} shell script(s)")
    user_output()

    ctx.feedback.info(f"Running shfmt ({lint_mode.value})...")
    shfmt_ok = run_shfmt(ctx.shell, ctx.feedback, scripts, lint_mode, root)
    user_output()

    ctx.feedback.info("Running shellcheck...")
    shellcheck_ok = run_shellcheck(ctx.shell, ctx.feedback, scripts, root)
    user_output()

    if shfmt_ok and shellcheck_ok:
        ctx.feedback.success("All checks passed")
        return

    ctx.feedback.warn("Some checks failed")
    if not shfmt_ok:
        ctx.feedback.detail("shfmt: run with --format to fix")
    if not shellcheck_ok:
        ctx.feedback.detail("shellcheck: fix issues manually")
    raise SystemExit(1)
