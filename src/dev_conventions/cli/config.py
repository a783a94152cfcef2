import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomlkit

from dev_conventions.cli.constants import DEFAULT_SYNC_BRANCH, DEFAULT_SYNC_REMOTE


class ConfigError(Exception):
    """Raised when `.dev-conventions/config.toml` cannot be interpreted."""


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `.dev-conventions/config.toml`."""

    default_target: str | None
    sync_remote: str
    sync_branch: str
    sync_files: tuple[str, ...] | None
    sync_push: bool

    @staticmethod
    def defaults() -> "LoadedConfig":
        return LoadedConfig(
            default_target=None,
            sync_remote=DEFAULT_SYNC_REMOTE,
            sync_branch=DEFAULT_SYNC_BRANCH,
            sync_files=None,
            sync_push=False,
        )


def _expect_str(value: object, key: str, cfg_path: Path) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' in {cfg_path} must be a string")
    return value


def _expect_table(value: object, key: str, cfg_path: Path) -> dict[str, object]:
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' in {cfg_path} must be a table")
    return value


def load_config(config_dir: Path) -> LoadedConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Example config:
      [changelog]
      default_target = "dev"

      [sync]
      remote = "https://github.com/myfork/dev-conventions"
      branch = "main"
      files = ["conventions/AGENTS.md"]
      push = true
    """

    cfg_path = config_dir / "config.toml"
    if not cfg_path.exists():
        return LoadedConfig.defaults()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {cfg_path}: {e}") from e

    changelog = _expect_table(data.get("changelog", {}), "changelog", cfg_path)
    sync = _expect_table(data.get("sync", {}), "sync", cfg_path)

    default_target = changelog.get("default_target")
    if default_target is not None:
        default_target = _expect_str(default_target, "changelog.default_target", cfg_path)

    files = sync.get("files")
    sync_files: tuple[str, ...] | None = None
    if files is not None:
        if not isinstance(files, list):
            raise ConfigError(f"'sync.files' in {cfg_path} must be a list of paths")
        sync_files = tuple(_expect_str(f, "sync.files", cfg_path) for f in files)

    push = sync.get("push", False)
    if not isinstance(push, bool):
        raise ConfigError(f"'sync.push' in {cfg_path} must be true or false")

    return LoadedConfig(
        default_target=default_target,
        sync_remote=_expect_str(sync.get("remote", DEFAULT_SYNC_REMOTE), "sync.remote", cfg_path),
        sync_branch=_expect_str(sync.get("branch", DEFAULT_SYNC_BRANCH), "sync.branch", cfg_path),
        sync_files=sync_files,
        sync_push=push,
    )


def save_config(config_dir: Path, config: LoadedConfig) -> None:
    """Save LoadedConfig to config.toml, preserving formatting.

    Creates the config directory if it doesn't exist. Existing comments and
    unrelated keys are kept because the document is edited in place with
    tomlkit.
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    cfg_path = config_dir / "config.toml"

    if cfg_path.exists():
        doc = tomlkit.parse(cfg_path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()

    if "changelog" not in doc:
        doc["changelog"] = tomlkit.table()
    changelog = doc["changelog"]
    if config.default_target is not None:
        changelog["default_target"] = config.default_target  # type: ignore[index]
    elif "default_target" in changelog:  # type: ignore[operator]
        del changelog["default_target"]  # type: ignore[union-attr]

    if "sync" not in doc:
        doc["sync"] = tomlkit.table()
    sync = doc["sync"]
    sync["remote"] = config.sync_remote  # type: ignore[index]
    sync["branch"] = config.sync_branch  # type: ignore[index]
    sync["push"] = config.sync_push  # type: ignore[index]
    if config.sync_files is not None:
        sync["files"] = list(config.sync_files)  # type: ignore[index]
    elif "files" in sync:  # type: ignore[operator]
        del sync["files"]  # type: ignore[union-attr]

    cfg_path.write_text(tomlkit.dumps(doc), encoding="utf-8")
