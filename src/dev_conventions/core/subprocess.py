"""Subprocess execution with rich error context.

Every external tool call that must succeed goes through
run_subprocess_with_context, so a failure surfaces with the operation being
attempted, the command line, the exit code and whatever the tool printed.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path


def _decoded(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace").strip()
    return stream.strip()


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command that must succeed, capturing its output as text.

    Args:
        cmd: Command and arguments to execute
        operation_context: What the command does, phrased to follow "Failed to"
        cwd: Working directory for the command

    Raises:
        RuntimeError: If the command exits non-zero or cannot be found. The
            message names the operation, the command line and its output.
    """
    cmd_str = " ".join(str(arg) for arg in cmd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        lines = [
            f"Failed to {operation_context}",
            f"Command: {cmd_str}",
            f"Exit code: {e.returncode}",
        ]
        stdout_text = _decoded(e.stdout)
        if stdout_text:
            lines.append(f"stdout: {stdout_text}")
        stderr_text = _decoded(e.stderr)
        if stderr_text:
            lines.append(f"stderr: {stderr_text}")
        raise RuntimeError("\n".join(lines)) from e
    except FileNotFoundError as e:
        raise RuntimeError(
            f"Command not found while trying to {operation_context}: {cmd[0]}\n"
            f"Full command: {cmd_str}"
        ) from e
