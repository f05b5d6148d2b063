"""Build-orchestrator event payloads.

The host orchestrator is a black box; these models are the shape the
recorder expects at its boundary.  ``SessionManifest`` is a recorded session
that the ``replay`` command feeds through the recorder.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from artiforge.models.artifacts import ModuleArtifact, resolve_against_base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _EventModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class ProjectDescriptor(_EventModel):
    """A module (Maven project) as seen by the orchestrator."""

    group_id: str
    artifact_id: str
    version: str
    name: str = ""
    packaging: str = "jar"
    file: Path | None = None  # the project's own POM
    artifact: ModuleArtifact | None = None
    attached_artifacts: list[ModuleArtifact] = []
    dependencies: list[ModuleArtifact] = []  # the live resolved graph
    properties: dict[str, str] = {}

    @field_validator("file", mode="after")
    @classmethod
    def resolve_file(cls, value: Path | None, info: ValidationInfo) -> Path | None:
        return resolve_against_base(value, info)

    @property
    def module_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def produced_artifacts(self) -> list[ModuleArtifact]:
        """The primary artifact followed by the attached ones."""
        primary = [self.artifact] if self.artifact is not None else []
        return primary + list(self.attached_artifacts)


class BuildSession(_EventModel):
    """Session-wide facts known when the recorder is created."""

    top_level_project: str = ""
    start_time: datetime = Field(default_factory=_utcnow)


class SessionOutcome(_EventModel):
    """Reported at session end. Any exception aborts build-info publication."""

    exceptions: list[str] = []
    end_time: datetime = Field(default_factory=_utcnow)

    @property
    def has_exceptions(self) -> bool:
        return bool(self.exceptions)


class ModuleOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class ResolvedArtifact(_EventModel):
    """An artifact resolved during module execution (build-time dependency)."""

    artifact: ModuleArtifact
    context: str = "project"  # "plugin" for tooling-internal resolution


class ManifestEntry(_EventModel):
    outcome: ModuleOutcome = ModuleOutcome.SUCCEEDED
    project: ProjectDescriptor
    resolved: list[ResolvedArtifact] = []


class SessionManifest(_EventModel):
    """A recorded build session, replayable through the recorder."""

    top_level_project: str = ""
    start_time: datetime | None = None
    modules: list[ManifestEntry] = []
    exceptions: list[str] = []
