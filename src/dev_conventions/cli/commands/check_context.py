from pathlib import Path

import click

from dev_conventions.cli.commands.hook_output import report_install, report_remove
from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import user_output
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.context_drift import (
    ContextDrift,
    DriftKind,
    check_context_file,
    find_context_files,
)
from dev_conventions.core.hooks import (
    PRE_COMMIT_CONTEXT_HOOK,
    HookError,
    install_hook,
    remove_hook,
)


def _report_drift(
    ctx: DevConventionsContext, context_file: Path, drifts: list[ContextDrift]
) -> None:
    structural = [
        d
        for d in drifts
        if d.kind in (DriftKind.LISTED_BUT_MISSING, DriftKind.EXISTS_BUT_UNLISTED)
    ]
    if structural:
        ctx.feedback.warn(f"context.md structural drift: {context_file}")
        for drift in structural:
            ctx.feedback.detail(f"{drift.kind.value}: {drift.filename}")

    for drift in drifts:
        match drift.kind:
            case DriftKind.DESCRIPTION_MISMATCH:
                ctx.feedback.warn(f"context.md content drift: {context_file}")
                ctx.feedback.detail(drift.filename)
                ctx.feedback.detail(f"  context.md : {drift.listed_description}")
                ctx.feedback.detail(f"  header     : {drift.header_description}")
            case DriftKind.MISSING_PURPOSE_HEADER:
                ctx.feedback.warn(
                    f"context.md entry references file without header: {drift.filename}"
                )
                ctx.feedback.detail(f"File in {context_file} lacks required header with Purpose:")
            case DriftKind.LISTED_BUT_MISSING | DriftKind.EXISTS_BUT_UNLISTED:
                pass


@click.command("check-context")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory to scan (default: repository root).",
)
@click.option("--install-hook", "install", is_flag=True, help="Install a pre-commit hook.")
@click.option("--remove-hook", "remove", is_flag=True, help="Remove the pre-commit hook.")
@click.pass_obj
def check_context_cmd(
    ctx: DevConventionsContext, root: Path | None, install: bool, remove: bool
) -> None:
    """Verify context.md files match their directory contents."""
    Ensure.invariant(not (install and remove), "--install-hook and --remove-hook conflict")

    if install or remove:
        repo = Ensure.in_repo(ctx)
        if install:
            try:
                outcome = install_hook(repo.hooks_dir, PRE_COMMIT_CONTEXT_HOOK)
            except HookError as e:
                Ensure.fail(str(e))
            report_install(ctx, PRE_COMMIT_CONTEXT_HOOK, outcome, repo.hooks_dir)
        else:
            removed = remove_hook(repo.hooks_dir, PRE_COMMIT_CONTEXT_HOOK)
            report_remove(ctx, PRE_COMMIT_CONTEXT_HOOK, removed)
        return

    scan_root = root if root is not None else ctx.project_root
    ctx.feedback.info(f"Checking context.md files in {scan_root}...")
    user_output()

    context_files = find_context_files(scan_root)
    if not context_files:
        ctx.feedback.detail("No context.md files found")
        return

    drift_found = False
    for context_file in context_files:
        drifts = check_context_file(context_file)
        if drifts:
            drift_found = True
            _report_drift(ctx, context_file, drifts)
        else:
            ctx.feedback.detail(f"OK: {context_file}")

    if drift_found:
        raise SystemExit(1)
