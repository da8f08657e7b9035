"""Pydantic models for layout validation.

A layout declares which repositories are cloned into the scratch
directory and which Sway projects inside them are relocated into the
output directory once built.
"""

import re
from pathlib import PurePosixPath
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Names become single path components under the scratch/output roots;
# a leading dot is reserved for the scratch log directory
NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.\-]+$")
BUILD_PROFILE_PATTERN = re.compile(r"^[a-zA-Z0-9_\-]+$")


def _validate_name(v: str, field_name: str) -> str:
    if not NAME_PATTERN.match(v) or v.startswith("."):
        raise ValueError(
            f"{field_name} must match pattern {NAME_PATTERN.pattern} "
            f"and not start with '.', got '{v}'"
        )
    return v


class RepositorySchema(BaseModel):
    """Schema for a source repository.

    Attributes:
        name: Checkout directory name inside the scratch directory.
        url: Clone address passed to git.
        ref: Optional branch or tag to check out (default branch if unset).
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(description="Checkout directory name", min_length=1)]
    url: Annotated[str, Field(description="Clone address", min_length=1)]
    ref: str | None = Field(default=None, description="Branch or tag to clone")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is a safe directory name."""
        return _validate_name(v, "repository name")

    @field_validator("url", "ref")
    @classmethod
    def validate_no_whitespace(cls, v: str | None) -> str | None:
        """Reject values git would split or misread."""
        if v is None:
            return v
        if not v.strip() or any(c.isspace() for c in v):
            raise ValueError(f"value must be non-empty without whitespace, got '{v}'")
        if v.startswith("-"):
            raise ValueError(f"value must not start with '-', got '{v}'")
        return v


class ArtifactSchema(BaseModel):
    """Schema for an artifact mapping.

    Attributes:
        name: Output directory name under the output root.
        repository: Name of the repository the project lives in.
        project_path: Relative path of the Sway project inside the checkout.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(description="Output directory name", min_length=1)]
    repository: Annotated[str, Field(description="Source repository name", min_length=1)]
    project_path: Annotated[
        str, Field(description="Project path inside the checkout", min_length=1)
    ]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is a safe directory name."""
        return _validate_name(v, "artifact name")

    @field_validator("project_path")
    @classmethod
    def validate_project_path(cls, v: str) -> str:
        """Validate project_path stays inside the checkout."""
        path = PurePosixPath(v)
        if path.is_absolute():
            raise ValueError(f"project_path must be relative, got '{v}'")
        if ".." in path.parts:
            raise ValueError(f"project_path must not contain '..', got '{v}'")
        return path.as_posix()


class LayoutSchema(BaseModel):
    """Complete layout: repositories to fetch and artifacts to relocate.

    Repositories are cloned and built in declaration order; artifacts are
    relocated in declaration order.
    """

    model_config = ConfigDict(extra="forbid")

    repositories: Annotated[list[RepositorySchema], Field(min_length=1)]
    artifacts: Annotated[list[ArtifactSchema], Field(min_length=1)]
    build_profile: str = Field(
        default="release", description="forc build profile and out/ subdirectory"
    )

    @field_validator("build_profile")
    @classmethod
    def validate_build_profile(cls, v: str) -> str:
        """Validate build_profile is a plain identifier."""
        if not BUILD_PROFILE_PATTERN.match(v):
            raise ValueError(
                f"build_profile must match pattern {BUILD_PROFILE_PATTERN.pattern}, got '{v}'"
            )
        return v

    @model_validator(mode="after")
    def validate_references(self) -> "LayoutSchema":
        """Validate names are unique and artifacts reference declared repositories."""
        repo_names = [r.name for r in self.repositories]
        duplicates = {n for n in repo_names if repo_names.count(n) > 1}
        if duplicates:
            raise ValueError(f"duplicate repository names: {sorted(duplicates)}")

        artifact_names = [a.name for a in self.artifacts]
        duplicates = {n for n in artifact_names if artifact_names.count(n) > 1}
        if duplicates:
            raise ValueError(f"duplicate artifact names: {sorted(duplicates)}")

        for artifact in self.artifacts:
            if artifact.repository not in repo_names:
                raise ValueError(
                    f"artifact '{artifact.name}' references unknown repository "
                    f"'{artifact.repository}'"
                )
        return self

    def artifacts_for(self, repository: str) -> list[ArtifactSchema]:
        """Return the artifacts built from a repository."""
        return [a for a in self.artifacts if a.repository == repository]


__all__ = [
    "ArtifactSchema",
    "LayoutSchema",
    "RepositorySchema",
]
