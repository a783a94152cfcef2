"""Resumable workflow state for `dev-conventions changelog`.

The state file lives at the repository root and is line-oriented KEY=VALUE:

    BRANCH=feat-x
    TARGET=main
    HEAD=abc1234
    STAGE=changelog_committed
    STAGE=merged
    MERGE_HEAD=def5678

BRANCH, TARGET and HEAD are written once. STAGE and MERGE_HEAD lines are only
ever appended, so the file doubles as a record of the transitions a run went
through. The file exists only while a workflow is in progress.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

STATE_FILE_NAME = ".changelog-merge-state"


class WorkflowStage(Enum):
    """Recorded milestones of a changelog merge."""

    CHANGELOG_COMMITTED = "changelog_committed"
    MERGED = "merged"


# Every legal prefix of the stage history.
_LEGAL_STAGE_ORDERS: tuple[tuple[WorkflowStage, ...], ...] = (
    (),
    (WorkflowStage.CHANGELOG_COMMITTED,),
    (WorkflowStage.CHANGELOG_COMMITTED, WorkflowStage.MERGED),
)


class StateFileError(Exception):
    """Raised when the state file exists but cannot be interpreted."""


class InvalidStageTransition(Exception):
    """Raised when a stage would be recorded out of order."""


@dataclass(frozen=True)
class WorkflowState:
    """In-memory view of the state file."""

    branch: str
    target: str
    head: str
    stages: tuple[WorkflowStage, ...]
    merge_head: str | None = None

    def has_stage(self, stage: WorkflowStage) -> bool:
        return stage in self.stages

    def with_stage(self, stage: WorkflowStage) -> "WorkflowState":
        """Return a copy with `stage` appended.

        Raises:
            InvalidStageTransition: If the resulting history is not a legal order
        """
        stages = (*self.stages, stage)
        if stages not in _LEGAL_STAGE_ORDERS:
            history = ", ".join(s.value for s in self.stages) or "none"
            raise InvalidStageTransition(
                f"Cannot record stage '{stage.value}' after: {history}"
            )
        return replace(self, stages=stages)


def state_file_path(repo_root: Path) -> Path:
    return repo_root / STATE_FILE_NAME


def state_exists(repo_root: Path) -> bool:
    return state_file_path(repo_root).exists()


def parse_state(content: str) -> WorkflowState:
    """Parse state file content.

    Unknown keys and malformed lines are ignored.

    Raises:
        StateFileError: If a required key is missing, a stage value is
            unknown, or stages appear in an illegal order
    """
    values: dict[str, str] = {}
    stages: list[WorkflowStage] = []
    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if key == "STAGE":
            try:
                stages.append(WorkflowStage(value))
            except ValueError as e:
                raise StateFileError(f"Unknown stage '{value}' in state file") from e
        else:
            values[key] = value

    missing = [key for key in ("BRANCH", "TARGET", "HEAD") if not values.get(key)]
    if missing:
        raise StateFileError(f"State file is missing {', '.join(missing)}")

    if tuple(stages) not in _LEGAL_STAGE_ORDERS:
        order = ", ".join(stage.value for stage in stages)
        raise StateFileError(f"State file records stages out of order: {order}")

    return WorkflowState(
        branch=values["BRANCH"],
        target=values["TARGET"],
        head=values["HEAD"],
        stages=tuple(stages),
        merge_head=values.get("MERGE_HEAD") or None,
    )


def load_state(repo_root: Path) -> WorkflowState | None:
    """Load the state file, or None if no workflow is in progress."""
    path = state_file_path(repo_root)
    if not path.exists():
        return None
    return parse_state(path.read_text(encoding="utf-8"))


def save_state(repo_root: Path, state: WorkflowState) -> None:
    """Write the initial state record.

    The write-once keys are followed by the stages recorded so far.
    """
    lines = [f"BRANCH={state.branch}", f"TARGET={state.target}", f"HEAD={state.head}"]
    lines.extend(f"STAGE={stage.value}" for stage in state.stages)
    if state.merge_head is not None:
        lines.append(f"MERGE_HEAD={state.merge_head}")
    state_file_path(repo_root).write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug("Saved workflow state: %s", state)


def append_merged(repo_root: Path, state: WorkflowState, merge_head: str) -> WorkflowState:
    """Record the merge by appending STAGE=merged and MERGE_HEAD.

    Raises:
        InvalidStageTransition: If the changelog commit was never recorded
            or the merge is already recorded
    """
    updated = replace(state.with_stage(WorkflowStage.MERGED), merge_head=merge_head)
    with state_file_path(repo_root).open("a", encoding="utf-8") as f:
        f.write(f"STAGE={WorkflowStage.MERGED.value}\n")
        f.write(f"MERGE_HEAD={merge_head}\n")
    logger.debug("Appended merged stage: %s", merge_head)
    return updated


def delete_state(repo_root: Path) -> None:
    state_file_path(repo_root).unlink(missing_ok=True)


def ensure_gitignored(repo_root: Path, pattern: str = STATE_FILE_NAME) -> bool:
    """Append `pattern` to .gitignore unless an identical line is present.

    Creates .gitignore if it does not exist.

    Returns:
        True if the file was modified
    """
    gitignore = repo_root / ".gitignore"
    content = ""
    if gitignore.exists():
        content = gitignore.read_text(encoding="utf-8")
        if pattern in (line.strip() for line in content.splitlines()):
            return False

    if content and not content.endswith("\n"):
        content += "\n"
    gitignore.write_text(f"{content}{pattern}\n", encoding="utf-8")
    return True
