"""Layout loading and rendering.

Layouts are read from YAML or JSON files; the format is chosen by
file extension.
"""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from fetch_abis.layout.defaults import mira_v1_layout
from fetch_abis.layout.schema import LayoutSchema


class LayoutError(Exception):
    """Raised when a layout file cannot be loaded or validated."""

    def __init__(self, message: str, code: str = "layout_invalid") -> None:
        """Initialize LayoutError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Raises:
        ValueError: If the document is not a mapping.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        ValueError: If the document is not an object.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def load_layout(path: Path) -> LayoutSchema:
    """Load and validate a layout from a YAML or JSON file.

    Args:
        path: Path to the layout file (.yaml, .yml or .json).

    Returns:
        Validated LayoutSchema instance.

    Raises:
        LayoutError: If the file is missing, unparsable or invalid.
    """
    if not path.is_file():
        raise LayoutError(f"Layout file not found: {path}", code="layout_not_found")

    suffix = path.suffix.lower()
    try:
        if suffix in (".yaml", ".yml"):
            data = load_yaml(path)
        elif suffix == ".json":
            data = load_json(path)
        else:
            raise ValueError(
                f"Unsupported file extension '{suffix}'. Use .yaml, .yml, or .json"
            )
        return LayoutSchema.model_validate(data)
    except ValidationError as e:
        raise LayoutError(f"Invalid layout {path}: {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise LayoutError(f"Failed to parse layout {path}: {e}") from e
    except ValueError as e:
        raise LayoutError(f"Invalid layout {path}: {e}") from e


def resolve_layout(path: Path | None = None) -> LayoutSchema:
    """Return the layout from `path`, or the built-in Mira v1 layout."""
    if path is None:
        return mira_v1_layout()
    return load_layout(path)


def layout_to_yaml_string(layout: LayoutSchema) -> str:
    """Convert a layout to a YAML string."""
    data = layout.model_dump(exclude_none=True)
    result: str = yaml.dump(
        data, default_flow_style=False, allow_unicode=True, sort_keys=False
    )
    return result


def layout_to_json_string(layout: LayoutSchema) -> str:
    """Convert a layout to a JSON string."""
    data = layout.model_dump(exclude_none=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


__all__ = [
    "LayoutError",
    "layout_to_json_string",
    "layout_to_yaml_string",
    "load_json",
    "load_layout",
    "load_yaml",
    "resolve_layout",
]
