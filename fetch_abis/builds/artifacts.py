"""Artifact discovery and manifest generation.

This module handles:
- Listing files relocated into the output layout
- Classifying files by forc output naming (contents are never parsed)
- Computing checksums
- Writing the output manifest
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from fetch_abis.layout.schema import LayoutSchema
from fetch_abis.types import ArtifactInfo

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"
MANIFEST_VERSION = "1.0"

# Suffix patterns, checked in order (lowercase for case-insensitive matching)
ABI_PATTERNS = ["-abi.json"]
STORAGE_SLOTS_PATTERNS = ["-storage_slots.json"]
BIN_HASH_PATTERNS = ["-bin-hash"]
BYTECODE_PATTERNS = [".bin"]

HASH_CHUNK_SIZE = 64 * 1024  # 64KB


def classify_artifact(filename: str) -> str:
    """Classify an output file by its name.

    Args:
        filename: The file name.

    Returns:
        Artifact kind (abi, storage_slots, bin_hash, bytecode, other).
    """
    filename_lower = filename.lower()

    if any(filename_lower.endswith(p) for p in ABI_PATTERNS):
        return "abi"
    if any(filename_lower.endswith(p) for p in STORAGE_SLOTS_PATTERNS):
        return "storage_slots"
    if any(filename_lower.endswith(p) for p in BIN_HASH_PATTERNS):
        return "bin_hash"
    if any(filename_lower.endswith(p) for p in BYTECODE_PATTERNS):
        return "bytecode"

    return "other"


def compute_file_hash(
    file_path: Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def discover_artifacts(
    output_root: Path,
    layout: LayoutSchema | None = None,
) -> list[ArtifactInfo]:
    """Discover files in the output layout.

    Args:
        output_root: Root of the output layout.
        layout: If given, only the layout's artifact directories are scanned.

    Returns:
        List of ArtifactInfo, sorted by relative path.
    """
    if not output_root.is_dir():
        logger.warning("Output directory does not exist: %s", output_root)
        return []

    if layout is not None:
        roots = [output_root / a.name for a in layout.artifacts]
    else:
        roots = sorted(p for p in output_root.iterdir() if p.is_dir())

    artifacts: list[ArtifactInfo] = []
    for root in roots:
        if not root.is_dir():
            continue
        for path in sorted(root.rglob("*")):
            if not path.is_file():
                continue

            artifact = ArtifactInfo(
                filename=path.name,
                relative_path=path.relative_to(output_root).as_posix(),
                size_bytes=path.stat().st_size,
                sha256=compute_file_hash(path),
                kind=classify_artifact(path.name),
            )
            artifacts.append(artifact)
            logger.debug(
                "Discovered artifact: %s (kind=%s, size=%d)",
                artifact.relative_path,
                artifact.kind,
                artifact.size_bytes,
            )

    artifacts.sort(key=lambda a: a.relative_path)
    logger.info("Discovered %d files in %s", len(artifacts), output_root)
    return artifacts


def generate_manifest(
    artifacts: list[ArtifactInfo],
    layout: LayoutSchema | None = None,
) -> dict[str, Any]:
    """Generate an output manifest.

    The manifest holds no timestamps, so identical outputs yield identical
    manifests.

    Args:
        artifacts: Discovered artifacts.
        layout: Optional layout recorded as the sources of the outputs.

    Returns:
        Manifest dictionary suitable for JSON serialization.
    """
    manifest: dict[str, Any] = {
        "version": MANIFEST_VERSION,
        "artifacts": [asdict(a) for a in artifacts],
    }

    if layout is not None:
        manifest["build_profile"] = layout.build_profile
        manifest["sources"] = [
            r.model_dump(exclude_none=True) for r in layout.repositories
        ]

    manifest["summary"] = {
        "total_files": len(artifacts),
        "total_size_bytes": sum(a.size_bytes for a in artifacts),
        "kinds": sorted({a.kind for a in artifacts if a.kind}),
    }

    return manifest


def write_manifest(
    manifest: dict[str, Any],
    output_path: Path,
) -> Path:
    """Write manifest to a JSON file.

    Args:
        manifest: Manifest dictionary.
        output_path: Output file path.

    Returns:
        Path to written manifest file.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, sort_keys=True)
        f.write("\n")

    logger.info("Wrote manifest to %s", output_path)
    return output_path


def discover_and_manifest(
    output_root: Path,
    layout: LayoutSchema,
) -> tuple[list[ArtifactInfo], Path]:
    """Discover the layout's outputs and write `<output_root>/manifest.json`.

    Returns:
        Tuple of (artifacts list, manifest path).
    """
    artifacts = discover_artifacts(output_root, layout=layout)
    manifest = generate_manifest(artifacts, layout=layout)
    path = write_manifest(manifest, output_root / MANIFEST_FILENAME)
    return artifacts, path


def read_manifest(output_root: Path) -> dict[str, Any] | None:
    """Read `<output_root>/manifest.json` if present."""
    path = output_root / MANIFEST_FILENAME
    if not path.is_file():
        return None
    with path.open(encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    return data


__all__ = [
    "ABI_PATTERNS",
    "BIN_HASH_PATTERNS",
    "BYTECODE_PATTERNS",
    "HASH_CHUNK_SIZE",
    "MANIFEST_FILENAME",
    "STORAGE_SLOTS_PATTERNS",
    "classify_artifact",
    "compute_file_hash",
    "discover_and_manifest",
    "discover_artifacts",
    "generate_manifest",
    "read_manifest",
    "write_manifest",
]
