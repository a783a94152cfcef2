import dataclasses
import logging

import click

from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import user_output
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.prompt import AutoConfirmPrompter
from dev_conventions.core.sync import (
    SYNC_COMMIT_MESSAGE,
    SyncReport,
    default_sync_files,
    github_repo_path,
    sync_files,
)

logger = logging.getLogger(__name__)


def _parse_file_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _show_summary(ctx: DevConventionsContext, report: SyncReport) -> None:
    user_output()
    ctx.feedback.info("Summary")
    ctx.feedback.detail(f"Updated: {len(report.updated)} files")
    ctx.feedback.detail(f"Untracked/modified: {len(report.needs_staging)} files")
    ctx.feedback.detail(f"Skipped: {len(report.skipped)} files (unchanged)")
    ctx.feedback.detail(f"Failed: {len(report.failed)} files")

    if report.updated:
        user_output()
        ctx.feedback.info("Updated files:")
        for name in report.updated:
            ctx.feedback.detail(name)

    if report.failed:
        user_output()
        ctx.feedback.warn("Failed files:")
        for name in report.failed:
            ctx.feedback.detail(name)


@click.command("sync")
@click.option("--remote", help="GitHub repository URL to sync from.")
@click.option("--branch", help="Branch to sync from.")
@click.option("--version", "version", help="Tag or commit to sync (overrides --branch).")
@click.option("--files", help="Comma-separated list of files to sync.")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing files.")
@click.option("--no-commit", is_flag=True, help="Write files but do not commit them.")
@click.option("--push/--no-push", default=None, help="Push after committing.")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmations.")
@click.pass_obj
def sync_cmd(
    ctx: DevConventionsContext,
    remote: str | None,
    branch: str | None,
    version: str | None,
    files: str | None,
    dry_run: bool,
    no_commit: bool,
    push: bool | None,
    yes: bool,
) -> None:
    """Sync dev-conventions files from a remote repository.

    Only files whose content differs from the remote are written. Changed
    files are committed as "chore: sync dev-conventions" unless --no-commit
    or --dry-run is given.
    """
    repo = Ensure.in_repo(ctx)
    if yes:
        ctx = dataclasses.replace(ctx, prompter=AutoConfirmPrompter())

    remote_url = remote or ctx.config.sync_remote
    repo_path = Ensure.not_none(
        github_repo_path(remote_url),
        f"Only GitHub repositories are supported currently: {remote_url}",
    )
    ref = version or branch or ctx.config.sync_branch
    should_push = push if push is not None else ctx.config.sync_push

    if files is not None:
        file_list = _parse_file_list(files)
    elif ctx.config.sync_files is not None:
        file_list = list(ctx.config.sync_files)
    else:
        file_list = default_sync_files(repo.root)
    Ensure.truthy(file_list, "No files to sync")

    ctx.feedback.info("Syncing dev-conventions")
    ctx.feedback.detail(f"Remote: https://github.com/{repo_path}")
    ctx.feedback.detail(f"Ref: {ref}")
    ctx.feedback.detail(f"Files: {' '.join(file_list)}")
    user_output()

    report = sync_files(
        ctx.git,
        ctx.remote_files,
        ctx.feedback,
        repo.root,
        repo_path=repo_path,
        ref=ref,
        files=file_list,
        dry_run=dry_run,
    )
    logger.debug("Sync report: %s", report)
    _show_summary(ctx, report)

    if report.failed:
        raise SystemExit(1)

    user_output()
    if dry_run:
        ctx.feedback.info("Dry-run complete, no files were modified")
        return

    to_commit = report.to_commit
    if not to_commit:
        ctx.feedback.info("No files need syncing")
        return

    commit_confirmed = not no_commit and ctx.prompter.confirm(
        f"Commit {len(to_commit)} synced files?", default=True
    )
    if not commit_confirmed:
        ctx.feedback.info("Files updated. Review changes and commit:")
        ctx.feedback.detail("git diff")
        ctx.feedback.detail(f"git add {' '.join(to_commit)}")
        ctx.feedback.detail(f'git commit -m "{SYNC_COMMIT_MESSAGE}"')
        return

    try:
        ctx.feedback.info("Committing changes...")
        ctx.git.stage_paths(repo.root, [repo.root / name for name in to_commit])
        ctx.git.commit(repo.root, SYNC_COMMIT_MESSAGE)
        ctx.feedback.detail(f"Committed {len(to_commit)} files")

        if should_push:
            ctx.feedback.info("Pushing...")
            ctx.git.push(repo.root, None, None)
            ctx.feedback.detail("Pushed to remote")
    except RuntimeError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e
