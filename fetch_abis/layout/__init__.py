"""Layout module.

This module handles:
- Validation of repository and artifact declarations
- Loading layouts from YAML/JSON
- The built-in Mira v1 layout
"""

from fetch_abis.layout.defaults import mira_v1_layout
from fetch_abis.layout.io import (
    LayoutError,
    layout_to_json_string,
    layout_to_yaml_string,
    load_layout,
    resolve_layout,
)
from fetch_abis.layout.schema import ArtifactSchema, LayoutSchema, RepositorySchema

__all__ = [
    # Schema
    "ArtifactSchema",
    "LayoutSchema",
    "RepositorySchema",
    # IO functions
    "LayoutError",
    "layout_to_json_string",
    "layout_to_yaml_string",
    "load_layout",
    "mira_v1_layout",
    "resolve_layout",
]
