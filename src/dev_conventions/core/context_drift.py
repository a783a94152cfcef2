"""Detecting drift between context.md files and the directories they describe.

A context.md lists the files of its directory as backticked names, one entry
per line in the form:

    - `lint.sh` — Shell script linting and formatting utilities

Two kinds of drift are detected:
- structural: names listed but missing, or files present but unlisted
- content: an entry's description differs from the `# Purpose:` line in the
  file's header, or the file has no such line
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

CONTEXT_FILE_NAME = "context.md"
PURPOSE_PREFIX = "# Purpose:"
DESCRIPTION_SEPARATOR = "— "

_BACKTICKED = re.compile(r"`([^`]+)`")


class DriftKind(Enum):
    LISTED_BUT_MISSING = "listed but missing"
    EXISTS_BUT_UNLISTED = "exists but unlisted"
    DESCRIPTION_MISMATCH = "description mismatch"
    MISSING_PURPOSE_HEADER = "missing purpose header"


@dataclass(frozen=True)
class ContextDrift:
    """One discrepancy found in a context.md file."""

    context_file: Path
    kind: DriftKind
    filename: str
    listed_description: str | None = None
    header_description: str | None = None


def find_context_files(root: Path) -> list[Path]:
    return sorted(
        path
        for path in root.rglob(CONTEXT_FILE_NAME)
        if path.is_file() and ".git" not in path.relative_to(root).parts
    )


def read_purpose(path: Path) -> str | None:
    """Return the text after the first `# Purpose:` line, or None."""
    with path.open(encoding="utf-8", errors="replace") as f:
        for line in f:
            if line.startswith(PURPOSE_PREFIX):
                return line.removeprefix(PURPOSE_PREFIX).strip()
    return None


def _parse_entry(line: str) -> tuple[str, str] | None:
    if not line.startswith("- `"):
        return None
    match = _BACKTICKED.search(line)
    _, sep, description = line.partition(DESCRIPTION_SEPARATOR)
    if match is None or not sep or not description.strip():
        return None
    return match.group(1), description.strip()


def check_context_file(context_file: Path) -> list[ContextDrift]:
    directory = context_file.parent
    content = context_file.read_text(encoding="utf-8")

    listed = set(_BACKTICKED.findall(content))
    actual = {
        path.name
        for path in directory.iterdir()
        if path.is_file() and path.name != CONTEXT_FILE_NAME
    }

    drifts = [
        ContextDrift(context_file, DriftKind.LISTED_BUT_MISSING, name)
        for name in sorted(listed - actual)
    ]
    drifts.extend(
        ContextDrift(context_file, DriftKind.EXISTS_BUT_UNLISTED, name)
        for name in sorted(actual - listed)
    )

    for line in content.splitlines():
        entry = _parse_entry(line)
        if entry is None:
            continue
        filename, description = entry
        file_path = directory / filename
        if not file_path.is_file():
            continue

        purpose = read_purpose(file_path)
        if purpose is None:
            drifts.append(ContextDrift(context_file, DriftKind.MISSING_PURPOSE_HEADER, filename))
        elif purpose != description:
            drifts.append(
                ContextDrift(
                    context_file,
                    DriftKind.DESCRIPTION_MISMATCH,
                    filename,
                    listed_description=description,
                    header_description=purpose,
                )
            )

    return drifts
