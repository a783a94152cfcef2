"""Development conventions tooling: changelog/merge workflow, sync, and lint."""

__version__ = "0.1.0"
