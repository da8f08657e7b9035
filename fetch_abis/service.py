"""Fetch pipeline service.

This is the main entry point for producing the output layout. A run:
1. Creates the scratch directory
2. Clones every repository into it
3. Runs `forc build` in every checkout
4. Creates the output directories
5. Moves each artifact's build output into its output directory
6. Deletes the scratch directory

Steps run strictly in this order and the first failure aborts the run,
leaving the scratch directory behind for inspection.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fetch_abis.builds.artifacts import discover_and_manifest
from fetch_abis.builds.relocate import (
    artifact_source_dir,
    prepare_output_dirs,
    relocate_artifact,
    remove_scratch_dir,
)
from fetch_abis.builds.runner import run_forc_build
from fetch_abis.config import Settings, get_settings
from fetch_abis.layout.io import resolve_layout
from fetch_abis.layout.schema import LayoutSchema
from fetch_abis.process import LOG_DIRNAME
from fetch_abis.sources.git import clone_repository
from fetch_abis.types import (
    FetchResult,
    RelocatedArtifact,
    RunStatus,
    StepName,
    StepTiming,
)

logger = logging.getLogger(__name__)


class PathConflictError(Exception):
    """Raised when the scratch and output directories overlap."""

    def __init__(self, message: str, code: str = "path_conflict") -> None:
        super().__init__(message)
        self.code = code


@contextmanager
def _timed(
    result: FetchResult,
    step: StepName,
    target: str | None = None,
) -> Iterator[None]:
    start = time.monotonic()
    yield
    duration = time.monotonic() - start
    logger.debug("Step %s (%s) took %.1fs", step.value, target or "-", duration)
    result.timings.append(
        StepTiming(step=step, target=target, duration_seconds=duration)
    )


def check_paths(
    scratch_dir: Path,
    output_dir: Path,
    layout: LayoutSchema | None = None,
) -> None:
    """Ensure the scratch directory cannot take the outputs with it.

    The scratch directory is deleted at the end of a run, so the output
    directory must not be it or live inside it. A scratch directory inside
    the output root is fine as long as it is not one of the layout's
    artifact directories (or inside one).

    Raises:
        PathConflictError: If the paths overlap.
    """
    scratch = scratch_dir.resolve()
    output = output_dir.resolve()
    if scratch == output or scratch in output.parents:
        raise PathConflictError(
            f"Output directory {output_dir} is inside scratch directory {scratch_dir}"
        )
    if layout is None:
        return
    for artifact in layout.artifacts:
        dest = output / artifact.name
        if scratch == dest or dest in scratch.parents:
            raise PathConflictError(
                f"Scratch directory {scratch_dir} overlaps the output directory "
                f"of artifact '{artifact.name}'"
            )


def check_tools(settings: Settings | None = None) -> dict[str, str | None]:
    """Locate the external tools a run needs.

    Returns:
        Mapping of configured executable name to resolved path (None if missing).
    """
    if settings is None:
        settings = get_settings()
    return {
        binary: shutil.which(binary)
        for binary in (settings.git_binary, settings.forc_binary)
    }


def fetch_abis(
    layout: LayoutSchema | None = None,
    settings: Settings | None = None,
    keep_scratch: bool | None = None,
    write_manifest: bool = True,
) -> FetchResult:
    """Clone, build and relocate every artifact of a layout.

    Args:
        layout: Layout to fetch; defaults to settings.layout_file or Mira v1.
        settings: Application settings.
        keep_scratch: Keep the scratch directory after success
            (defaults to settings.keep_scratch).
        write_manifest: Write `manifest.json` at the output root.

    Returns:
        FetchResult describing the completed run.

    Raises:
        PathConflictError: If scratch and output directories overlap.
        LayoutError: If the configured layout file is invalid.
        CloneError: If a clone fails.
        BuildExecutionError: If a build fails.
        RelocationError: If a build output directory is missing or cannot move.
    """
    if settings is None:
        settings = get_settings()
    if layout is None:
        layout = resolve_layout(settings.layout_file)
    if keep_scratch is None:
        keep_scratch = settings.keep_scratch

    scratch_dir = settings.scratch_dir
    output_dir = settings.output_dir
    check_paths(scratch_dir, output_dir, layout)

    result = FetchResult(
        status=RunStatus.RUNNING,
        output_dir=output_dir,
        scratch_dir=scratch_dir,
    )
    log_dir = scratch_dir / LOG_DIRNAME

    with _timed(result, StepName.PREPARE):
        if scratch_dir.exists():
            # A failed run leaves checkouts behind and git refuses to clone over them
            logger.warning("Removing stale scratch directory %s", scratch_dir)
            remove_scratch_dir(scratch_dir)
        logger.info("+ mkdir -p %s", scratch_dir)
        scratch_dir.mkdir(parents=True, exist_ok=True)

    logger.info(
        "Fetching sources: %s", ", ".join(r.name for r in layout.repositories)
    )
    for repo in layout.repositories:
        with _timed(result, StepName.CLONE, repo.name):
            clone_repository(
                repo,
                scratch_dir,
                git_binary=settings.git_binary,
                timeout=settings.clone_timeout,
                log_dir=log_dir,
            )

    logger.info("Building sources (profile=%s)", layout.build_profile)
    for repo in layout.repositories:
        with _timed(result, StepName.BUILD, repo.name):
            logger.info(
                "Building %s for %s",
                repo.name,
                ", ".join(a.name for a in layout.artifacts_for(repo.name)),
            )
            run_forc_build(
                scratch_dir / repo.name,
                log_path=log_dir / f"build-{repo.name}.log",
                forc_binary=settings.forc_binary,
                profile=layout.build_profile,
                timeout=settings.build_timeout,
            )

    with _timed(result, StepName.CREATE_OUTPUTS):
        dest_dirs = prepare_output_dirs(output_dir, layout)

    for artifact, dest_dir in zip(layout.artifacts, dest_dirs):
        source = artifact_source_dir(scratch_dir, layout, artifact)
        with _timed(result, StepName.RELOCATE, artifact.name):
            moved_to = relocate_artifact(source, dest_dir)
        result.relocated.append(
            RelocatedArtifact(name=artifact.name, source=source, destination=moved_to)
        )

    if write_manifest:
        _, result.manifest_path = discover_and_manifest(output_dir, layout)

    with _timed(result, StepName.CLEANUP):
        if keep_scratch:
            logger.info("Keeping scratch directory %s", scratch_dir)
        else:
            result.scratch_removed = remove_scratch_dir(scratch_dir)

    result.status = RunStatus.SUCCEEDED
    logger.info(
        "Relocated %d artifact(s) into %s", len(result.relocated), output_dir
    )
    return result


__all__ = [
    "LOG_DIRNAME",
    "PathConflictError",
    "check_paths",
    "check_tools",
    "fetch_abis",
]
