"""Logged subprocess execution shared by the clone and build steps.

Each command is echoed to the logger before it runs and its combined
stdout/stderr is written to a log file framed by header and footer lines.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

# Process logs live under the scratch directory; layout names cannot start with "."
LOG_DIRNAME = ".logs"


@dataclass
class ProcessResult:
    """Result of a logged process run.

    Attributes:
        exit_code: Process exit code.
        log_path: Path to the captured output.
        started_at: Start time.
        finished_at: Finish time.
        command: The command that was executed, shell-quoted.
    """

    exit_code: int
    log_path: Path
    started_at: datetime
    finished_at: datetime
    command: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


def run_logged(
    cmd: list[str],
    cwd: Path,
    log_path: Path,
    timeout: int | None = None,
) -> ProcessResult:
    """Run a command with output captured to a log file.

    Args:
        cmd: Command as list of strings.
        cwd: Working directory.
        log_path: File receiving stdout and stderr.
        timeout: Timeout in seconds (None = no timeout).

    Returns:
        ProcessResult with the exit code and timings.

    Raises:
        subprocess.TimeoutExpired: If the command exceeds `timeout`.
        OSError: If the command cannot be started.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)
    cmd_str = shlex.join(cmd)
    logger.info("+ %s (cwd: %s)", cmd_str, cwd)

    started_at = datetime.now(timezone.utc)
    with log_path.open("w") as log_file:
        log_file.write(f"# Command: {cmd_str}\n")
        log_file.write(f"# Started: {started_at.isoformat()}\n")
        log_file.write(f"# CWD: {cwd}\n")
        log_file.write("# " + "=" * 70 + "\n\n")
        log_file.flush()

        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            log_file.write(f"\n# TIMEOUT after {timeout} seconds\n")
            raise

    finished_at = datetime.now(timezone.utc)
    with log_path.open("a") as log_file:
        log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
        log_file.write(f"# Exit code: {result.returncode}\n")
        duration = (finished_at - started_at).total_seconds()
        log_file.write(f"# Duration: {duration:.1f}s\n")

    return ProcessResult(
        exit_code=result.returncode,
        log_path=log_path,
        started_at=started_at,
        finished_at=finished_at,
        command=cmd_str,
    )


def tail_log(log_path: Path, lines: int = 20) -> str:
    """Return the last `lines` lines of a log file (empty if unreadable)."""
    try:
        content = log_path.read_text(errors="replace")
    except OSError:
        return ""
    return "\n".join(content.splitlines()[-lines:])


__all__ = ["LOG_DIRNAME", "ProcessResult", "run_logged", "tail_log"]
