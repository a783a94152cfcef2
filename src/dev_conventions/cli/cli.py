import click

from dev_conventions import __version__
from dev_conventions.cli.commands.changelog.command import changelog_cmd
from dev_conventions.cli.commands.check_context import check_context_cmd
from dev_conventions.cli.commands.config import config_group
from dev_conventions.cli.commands.lint import lint_cmd
from dev_conventions.cli.commands.sync import sync_cmd
from dev_conventions.cli.output import machine_output
from dev_conventions.core.context import DevConventionsContext, create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

MENU_OPTIONS = (
    ("changelog", "Generate changelog and manage merge workflow"),
    ("sync", "Sync convention files from remote repository"),
    ("lint", "Format and check shell scripts"),
    ("check-context", "Verify context.md files match directory contents"),
    ("version", "Show version information"),
    ("help", "Show this help message"),
)


def _run_menu(ctx: click.Context, obj: DevConventionsContext) -> None:
    """Offer the commands through `gum choose` and run the selected one."""
    lines = [f"{name:<14}{description}" for name, description in MENU_OPTIONS]
    selected = obj.shell.run_interactive(
        ["gum", "choose", *lines, "--header=dev-conventions", "--header.foreground=cyan"]
    )
    if not selected:
        return

    name = selected.split()[0]
    command = cli.get_command(ctx, name) if name != "help" else None
    if command is None:
        click.echo(ctx.get_help())
        return
    ctx.invoke(command)


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.version_option(package_name="dev-conventions")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, quiet: bool) -> None:
    """Automate changelog merges, convention syncing and shell linting."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(quiet=quiet)

    if ctx.invoked_subcommand is not None:
        return

    if ctx.obj.shell.get_installed_tool_path("gum") is not None:
        _run_menu(ctx, ctx.obj)
    else:
        click.echo(ctx.get_help())


@click.command("version")
def version_cmd() -> None:
    """Show version information."""
    machine_output(f"dev-conventions v{__version__}")


# Register all commands
cli.add_command(changelog_cmd)
cli.add_command(sync_cmd)
cli.add_command(lint_cmd)
cli.add_command(check_context_cmd)
cli.add_command(config_group)
cli.add_command(version_cmd)


def main() -> None:
    """CLI entry point used by the `dev-conventions` console script."""
    cli()
