import dataclasses

import click

from dev_conventions.cli.config import LoadedConfig, save_config
from dev_conventions.cli.constants import CONFIG_DIR_NAME
from dev_conventions.cli.ensure import Ensure
from dev_conventions.cli.output import machine_output, user_output
from dev_conventions.core.context import DevConventionsContext
from dev_conventions.core.repo_discovery import NoRepoSentinel
from dev_conventions.core.sync import default_sync_files

CONFIG_KEYS = (
    "changelog.default_target",
    "sync.remote",
    "sync.branch",
    "sync.files",
    "sync.push",
)


def _parse_boolean_value(value: str, key: str) -> bool:
    """Parse "true" or "false" (case-insensitive).

    Raises:
        SystemExit: If the value is neither
    """
    if value.lower() not in ("true", "false"):
        user_output(f"Invalid boolean value for {key}: {value}")
        raise SystemExit(1)
    return value.lower() == "true"


def _parse_file_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _update_config_field(config: LoadedConfig, key: str, value: str) -> LoadedConfig:
    """Return a copy of `config` with one key changed.

    Raises:
        SystemExit: If the key is unknown or the value is invalid
    """
    match key:
        case "changelog.default_target":
            return dataclasses.replace(config, default_target=value or None)
        case "sync.remote":
            return dataclasses.replace(config, sync_remote=value)
        case "sync.branch":
            return dataclasses.replace(config, sync_branch=value)
        case "sync.files":
            return dataclasses.replace(config, sync_files=_parse_file_list(value) or None)
        case "sync.push":
            return dataclasses.replace(config, sync_push=_parse_boolean_value(value, key))
        case _:
            user_output(f"Invalid key: {key}")
            raise SystemExit(1)


def _format_value(config: LoadedConfig, key: str) -> str | None:
    match key:
        case "changelog.default_target":
            return config.default_target
        case "sync.remote":
            return config.sync_remote
        case "sync.branch":
            return config.sync_branch
        case "sync.files":
            return ",".join(config.sync_files) if config.sync_files is not None else None
        case "sync.push":
            return str(config.sync_push).lower()
        case _:
            return None


@click.group("config")
def config_group() -> None:
    """Manage dev-conventions configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: DevConventionsContext) -> None:
    """Print a list of configuration keys and values."""
    machine_output(click.style("Repository configuration:", bold=True))
    if isinstance(ctx.repo, NoRepoSentinel):
        machine_output("  (not in a git repository, showing defaults)")

    for key in CONFIG_KEYS:
        value = _format_value(ctx.config, key)
        if value is None:
            machine_output(f"  {key}=(not set)")
        else:
            machine_output(f"  {key}={value}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: DevConventionsContext, key: str) -> None:
    """Print the value of a given configuration key."""
    if key not in CONFIG_KEYS:
        user_output(f"Invalid key: {key}")
        raise SystemExit(1)

    if key == "sync.files":
        files = ctx.config.sync_files
        for name in files if files is not None else default_sync_files(ctx.project_root):
            machine_output(name)
        return

    value = _format_value(ctx.config, key)
    if value is None:
        user_output(f"Key not found: {key}")
        raise SystemExit(1)
    machine_output(value)


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: DevConventionsContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key."""
    repo = Ensure.in_repo(ctx)
    updated = _update_config_field(ctx.config, key, value)
    save_config(repo.root / CONFIG_DIR_NAME, updated)
    user_output(f"Set {key}={value}")
