"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes.
"""

from dev_conventions.core.git.abc import (
    CommitInfo,
    ConflictedPath,
    ConflictStatus,
    Git,
    MergeResult,
)
from dev_conventions.core.git.real import RealGit

__all__ = [
    "CommitInfo",
    "ConflictStatus",
    "ConflictedPath",
    "Git",
    "MergeResult",
    "RealGit",
]
