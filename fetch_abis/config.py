"""Configuration settings for fetch_abis.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the FETCH_ABIS_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="FETCH_ABIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    output_dir: Path = Field(
        default=Path("sway_abis"),
        description="Root directory receiving relocated build outputs",
    )
    scratch_dir: Path = Field(
        default=Path("tmp_abis"),
        description="Scratch directory holding checkouts during a run",
    )
    layout_file: Path | None = Field(
        default=None,
        description="YAML/JSON layout file (uses the built-in Mira v1 layout if not set)",
    )

    # Tools
    git_binary: str = Field(default="git", description="git executable")
    forc_binary: str = Field(default="forc", description="forc executable")

    # Operational modes
    keep_scratch: bool = Field(
        default=False,
        description="Keep the scratch directory after a successful run",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Timeouts (in seconds)
    clone_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout for each clone (no timeout if not set)",
    )
    build_timeout: int = Field(
        default=3600,
        ge=60,
        description="Timeout for each forc build",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
