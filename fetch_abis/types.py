"""Shared type definitions for fetch_abis.

This module contains dataclasses and enums shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class RunStatus(str, Enum):
    """Status of a fetch run."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"


class StepName(str, Enum):
    """Pipeline steps, in execution order."""

    PREPARE = "prepare"
    CLONE = "clone"
    BUILD = "build"
    CREATE_OUTPUTS = "create_outputs"
    RELOCATE = "relocate"
    CLEANUP = "cleanup"


@dataclass
class ArtifactInfo:
    """Information about a relocated build output file."""

    filename: str
    relative_path: str
    size_bytes: int
    sha256: str
    kind: str | None = None


@dataclass
class StepTiming:
    """Wall-clock duration of one pipeline step."""

    step: StepName
    target: str | None
    duration_seconds: float


@dataclass
class RelocatedArtifact:
    """An artifact directory moved into the output layout."""

    name: str
    source: Path
    destination: Path


@dataclass
class FetchResult:
    """Result of a complete fetch run."""

    status: RunStatus
    output_dir: Path
    scratch_dir: Path
    relocated: list[RelocatedArtifact] = field(default_factory=list)
    timings: list[StepTiming] = field(default_factory=list)
    manifest_path: Path | None = None
    scratch_removed: bool = False

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "status": self.status.value,
            "output_dir": str(self.output_dir),
            "scratch_dir": str(self.scratch_dir),
            "scratch_removed": self.scratch_removed,
            "manifest_path": str(self.manifest_path) if self.manifest_path else None,
            "relocated": [
                {
                    "name": r.name,
                    "source": str(r.source),
                    "destination": str(r.destination),
                }
                for r in self.relocated
            ],
            "timings": [
                {
                    "step": t.step.value,
                    "target": t.target,
                    "duration_seconds": round(t.duration_seconds, 3),
                }
                for t in self.timings
            ],
        }


__all__ = [
    "ArtifactInfo",
    "FetchResult",
    "RelocatedArtifact",
    "RunStatus",
    "StepName",
    "StepTiming",
]
