"""Build orchestration module.

This module handles:
- Running forc builds in repository checkouts
- Relocating build outputs into the output layout
- Artifact discovery and manifest generation
"""

from fetch_abis.builds.relocate import RelocationError
from fetch_abis.builds.runner import BuildExecutionError, BuildResult

__all__ = ["BuildExecutionError", "BuildResult", "RelocationError"]

# Submodules are accessed via fetch_abis.builds.artifacts, etc.
