"""Artifact models: build-side coordinates and deployable items.

``ModuleArtifact`` is what the build orchestrator reports: a Maven coordinate
plus the file it produced (or resolved).  ``DeployDetails`` is what the
deployer uploads: a repository-relative path, the backing file, the target
repository, checksums and the deploy property bag.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


def resolve_against_base(value: Path | None, info: ValidationInfo) -> Path | None:
    """Resolve a relative path against ``context["base_dir"]`` when given."""
    base_dir = (info.context or {}).get("base_dir")
    if value is None or base_dir is None or value.is_absolute():
        return value
    return Path(base_dir) / value


class ModuleArtifact(BaseModel):
    """A Maven artifact as reported by the build orchestrator.

    The structural identity (group, artifact, version, scope, type,
    classifier) is what the dependency merge de-duplicates on.  Scope is
    part of that identity, so the same coordinate under two scopes yields
    two entries.  The backing file is not part of the identity.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    group_id: str
    artifact_id: str
    version: str
    type: str = "jar"
    classifier: str = ""
    extension: str = ""  # defaults to type when blank
    scope: str = ""
    file: Path | None = None
    descriptor_file: Path | None = None  # POM carried as metadata, if any

    @field_validator("file", "descriptor_file", mode="after")
    @classmethod
    def resolve_paths(cls, value: Path | None, info: ValidationInfo) -> Path | None:
        return resolve_against_base(value, info)

    @property
    def identity(self) -> tuple[str, str, str, str, str, str]:
        return (
            self.group_id,
            self.artifact_id,
            self.version,
            self.scope,
            self.type,
            self.classifier,
        )

    @property
    def file_extension(self) -> str:
        """The packaging extension, falling back to the type."""
        return self.extension or self.type

    def __str__(self) -> str:
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        if self.scope:
            parts.append(self.scope)
        return ":".join(parts)


class DeployDetails(BaseModel):
    """A single deployable item: file, repository-relative path and target.

    Keyed in the deployable map by ``module_id:artifact_name``.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    artifact_path: str
    file: Path
    target_repository: str
    md5: str | None = None
    sha1: str | None = None
    properties: dict[str, str] = {}
    package_type: str = "maven"

    @property
    def checksums(self) -> dict[str, str]:
        """Known checksums, keyed by algorithm name."""
        found = {"md5": self.md5, "sha1": self.sha1}
        return {name: value for name, value in found.items() if value}
