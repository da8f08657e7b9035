"""Repository cloning with git.

This module handles:
- Composing `git clone` commands from repository declarations
- Executing clones with output captured to log files
- Enforcing clone timeouts
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from fetch_abis.layout.schema import RepositorySchema
from fetch_abis.process import LOG_DIRNAME, run_logged

logger = logging.getLogger(__name__)


class CloneError(Exception):
    """Raised when cloning a repository fails."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = "clone_failed",
        log_path: Path | None = None,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.code = code
        self.log_path = log_path


@dataclass
class CloneResult:
    """Result of a successful clone.

    Attributes:
        repository: Name of the cloned repository.
        checkout_dir: Directory holding the working tree.
        log_path: Path to the clone log file.
        command: The command that was executed.
        duration_seconds: Wall-clock duration.
    """

    repository: str
    checkout_dir: Path
    log_path: Path
    command: str
    duration_seconds: float


def compose_clone_command(
    repository: RepositorySchema,
    dest: Path,
    git_binary: str = "git",
) -> list[str]:
    """Compose the `git clone` command for a repository.

    Args:
        repository: Repository declaration.
        dest: Checkout directory, relative to the working directory of the clone.
        git_binary: git executable.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [git_binary, "clone"]
    if repository.ref:
        cmd.extend(["--branch", repository.ref])
    cmd.extend([repository.url, str(dest)])
    return cmd


def clone_repository(
    repository: RepositorySchema,
    scratch_dir: Path,
    git_binary: str = "git",
    timeout: int | None = None,
    log_dir: Path | None = None,
) -> CloneResult:
    """Clone a repository into the scratch directory.

    Args:
        repository: Repository declaration.
        scratch_dir: Directory receiving the checkout as `<scratch>/<name>`.
        git_binary: git executable.
        timeout: Clone timeout in seconds (None = no timeout).
        log_dir: Directory for the clone log (defaults to `<scratch>/.logs`).

    Returns:
        CloneResult for the new checkout.

    Raises:
        CloneError: If git exits non-zero, times out or cannot be started.
    """
    checkout_dir = scratch_dir / repository.name
    if log_dir is None:
        log_dir = scratch_dir / LOG_DIRNAME
    log_path = log_dir / f"clone-{repository.name}.log"

    # Relative to the scratch directory, which is the working directory
    cmd = compose_clone_command(
        repository, Path(repository.name), git_binary=git_binary
    )
    logger.info("Cloning %s from %s", repository.name, repository.url)

    try:
        result = run_logged(cmd, cwd=scratch_dir, log_path=log_path, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        message = f"Clone of {repository.name} timed out after {timeout} seconds"
        logger.error("%s. See log: %s", message, log_path)
        raise CloneError(
            message, exit_code=-1, code="clone_timeout", log_path=log_path
        ) from e
    except OSError as e:
        message = f"Failed to execute git: {e}"
        logger.error(message)
        raise CloneError(
            message, exit_code=None, code="execution_error", log_path=log_path
        ) from e

    if not result.success:
        message = f"Clone of {repository.name} failed with exit code {result.exit_code}"
        logger.error("%s. See log: %s", message, log_path)
        raise CloneError(message, exit_code=result.exit_code, log_path=log_path)

    return CloneResult(
        repository=repository.name,
        checkout_dir=checkout_dir,
        log_path=log_path,
        command=result.command,
        duration_seconds=result.duration_seconds,
    )


__all__ = [
    "CloneError",
    "CloneResult",
    "clone_repository",
    "compose_clone_command",
]
