"""Relocation of build outputs into the output layout.

Each artifact's `out/<profile>/` directory is moved into
`<output_root>/<artifact>/`, landing as `<output_root>/<artifact>/<profile>/`.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from fetch_abis.layout.schema import ArtifactSchema, LayoutSchema

logger = logging.getLogger(__name__)


class RelocationError(Exception):
    """Raised when an artifact directory cannot be moved."""

    def __init__(self, message: str, code: str = "move_failed") -> None:
        """Initialize RelocationError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


def artifact_source_dir(
    scratch_dir: Path,
    layout: LayoutSchema,
    artifact: ArtifactSchema,
) -> Path:
    """Return the build output directory for an artifact.

    Args:
        scratch_dir: Scratch directory holding the checkouts.
        layout: Layout the artifact belongs to.
        artifact: Artifact mapping.

    Returns:
        `<scratch>/<repository>/<project_path>/out/<profile>`.
    """
    return (
        scratch_dir
        / artifact.repository
        / artifact.project_path
        / "out"
        / layout.build_profile
    )


def prepare_output_dirs(output_root: Path, layout: LayoutSchema) -> list[Path]:
    """Create the output directory of every artifact (existing ones are kept).

    Args:
        output_root: Root of the output layout.
        layout: Layout naming the artifacts.

    Returns:
        The output directories, in layout order.
    """
    dirs: list[Path] = []
    for artifact in layout.artifacts:
        dest = output_root / artifact.name
        logger.info("+ mkdir -p %s", dest)
        dest.mkdir(parents=True, exist_ok=True)
        dirs.append(dest)
    return dirs


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def relocate_artifact(source_dir: Path, dest_dir: Path) -> Path:
    """Move a build output directory into its output directory.

    An existing entry with the same name under `dest_dir` is replaced.

    Args:
        source_dir: Directory to move (e.g. `.../out/release`).
        dest_dir: Existing output directory.

    Returns:
        The new location, `dest_dir / source_dir.name`.

    Raises:
        RelocationError: If the source is missing or the move fails.
    """
    if not source_dir.is_dir():
        raise RelocationError(
            f"Build output directory does not exist: {source_dir}",
            code="missing_source",
        )

    target = dest_dir / source_dir.name
    logger.info("+ mv -f %s %s", source_dir, dest_dir)
    try:
        if target.exists() or target.is_symlink():
            logger.debug("Replacing existing %s", target)
            _remove_path(target)
        shutil.move(str(source_dir), str(target))
    except OSError as e:
        raise RelocationError(f"Failed to move {source_dir} to {target}: {e}") from e

    return target


def remove_scratch_dir(scratch_dir: Path) -> bool:
    """Delete the scratch directory and everything in it.

    Args:
        scratch_dir: Directory to delete.

    Returns:
        True if something was removed, False if it did not exist.
    """
    if not scratch_dir.exists():
        return False
    logger.info("+ rm -rf %s", scratch_dir)
    shutil.rmtree(scratch_dir)
    return True


__all__ = [
    "RelocationError",
    "artifact_source_dir",
    "prepare_output_dirs",
    "relocate_artifact",
    "remove_scratch_dir",
]
