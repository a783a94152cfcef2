"""Shared constants for dev-conventions CLI commands."""

# Per-repository configuration directory (relative to the repo root)
CONFIG_DIR_NAME = ".dev-conventions"

# Default source repository for `dev-conventions sync`
DEFAULT_SYNC_REMOTE = "https://github.com/PopCat19/dev-conventions"
DEFAULT_SYNC_BRANCH = "main"

# Convention documents always requested by `dev-conventions sync`
DEFAULT_SYNC_FILES = (
    "conventions/AGENTS.md",
    "conventions/DEVELOPMENT.md",
    "conventions/DEV-EXAMPLES.md",
)

# Remote branch names offered by the changelog target menu
CONVENTIONAL_TARGET_BRANCHES = ("main", "master", "dev", "develop", "staging")
