"""Build runner for executing forc commands.

This module handles:
- Composing `forc build` commands for a build profile
- Executing builds with subprocess
- Capturing stdout/stderr to log files
- Enforcing build timeouts
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from fetch_abis.process import run_logged, tail_log

logger = logging.getLogger(__name__)

RELEASE_PROFILE = "release"


class BuildExecutionError(Exception):
    """Raised when build execution fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = "build_failed",
        log_path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.code = code
        self.log_path = log_path


@dataclass
class BuildResult:
    """Result of a build execution.

    Attributes:
        project_dir: Directory the build ran in.
        exit_code: Process exit code.
        log_path: Path to the build log file.
        started_at: Build start time.
        finished_at: Build finish time.
        command: The command that was executed.
    """

    project_dir: Path
    exit_code: int
    log_path: Path
    started_at: datetime
    finished_at: datetime
    command: str

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


def compose_forc_command(
    forc_binary: str = "forc",
    profile: str = RELEASE_PROFILE,
) -> list[str]:
    """Compose the `forc build` command.

    Args:
        forc_binary: forc executable.
        profile: Build profile; `release` maps to the `--release` flag.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [forc_binary, "build"]
    if profile == RELEASE_PROFILE:
        cmd.append("--release")
    else:
        cmd.extend(["--build-profile", profile])
    return cmd


def validate_forc_workspace(project_dir: Path) -> bool:
    """Check that a directory looks like a forc project or workspace.

    Args:
        project_dir: Path to validate.

    Returns:
        True if the directory holds a Forc.toml.
    """
    if not project_dir.is_dir():
        return False
    return (project_dir / "Forc.toml").is_file()


def run_forc_build(
    project_dir: Path,
    log_path: Path,
    forc_binary: str = "forc",
    profile: str = RELEASE_PROFILE,
    timeout: int | None = None,
) -> BuildResult:
    """Execute `forc build` in a checkout.

    Args:
        project_dir: Directory to build in (a repository checkout).
        log_path: File receiving build output.
        forc_binary: forc executable.
        profile: Build profile.
        timeout: Build timeout in seconds (None = no timeout).

    Returns:
        BuildResult with execution details.

    Raises:
        BuildExecutionError: If the build fails, times out or cannot start.
    """
    cmd = compose_forc_command(forc_binary=forc_binary, profile=profile)

    if not validate_forc_workspace(project_dir):
        logger.warning("No Forc.toml in %s; running forc anyway", project_dir)

    try:
        result = run_logged(
            cmd,
            cwd=project_dir,
            log_path=log_path,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        message = f"Build timed out after {timeout} seconds"
        logger.error("%s. See log: %s", message, log_path)
        raise BuildExecutionError(
            message, exit_code=-1, code="build_timeout", log_path=log_path
        ) from e
    except OSError as e:
        message = f"Failed to execute build: {e}"
        logger.error(message)
        raise BuildExecutionError(
            message, exit_code=None, code="execution_error", log_path=log_path
        ) from e

    if not result.success:
        message = f"Build in {project_dir} failed with exit code {result.exit_code}"
        logger.error("%s. See log: %s", message, log_path)
        logger.debug("Build output tail:\n%s", tail_log(log_path))
        raise BuildExecutionError(
            message, exit_code=result.exit_code, log_path=log_path
        )

    return BuildResult(
        project_dir=project_dir,
        exit_code=result.exit_code,
        log_path=log_path,
        started_at=result.started_at,
        finished_at=result.finished_at,
        command=result.command,
    )


__all__ = [
    "RELEASE_PROFILE",
    "BuildExecutionError",
    "BuildResult",
    "compose_forc_command",
    "run_forc_build",
    "validate_forc_workspace",
]
