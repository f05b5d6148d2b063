"""Build-info record models, the aggregate published once per session.

Serialized with the standard build-info JSON field names
(``durationMillis``, ``excludedArtifacts``, ``buildAgent`` ...) via camelCase
aliases.  All models are frozen: a Module is never mutated after being added
to the BuildInfo, and the BuildInfo is immutable once extracted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

BUILD_INFO_SCHEMA_VERSION = "1.0.1"


class _BuildInfoModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class Artifact(_BuildInfoModel):
    """An artifact produced by a module. Identity is the name within its module."""

    name: str
    type: str = ""
    md5: str | None = None
    sha1: str | None = None


class Dependency(_BuildInfoModel):
    """A dependency of a module. Scopes are informational only."""

    id: str
    type: str = ""
    scopes: list[str] = []
    md5: str | None = None
    sha1: str | None = None


class Module(_BuildInfoModel):
    """One build unit with its artifacts, excluded artifacts and dependencies."""

    id: str
    type: str = "maven"
    properties: dict[str, str] = {}
    artifacts: list[Artifact] = []
    excluded_artifacts: list[Artifact] = []
    dependencies: list[Dependency] = []

    @model_validator(mode="after")
    def check_artifact_names(self) -> Module:
        names = [a.name for a in self.artifacts]
        excluded = [a.name for a in self.excluded_artifacts]
        for label, group in (("artifacts", names), ("excluded artifacts", excluded)):
            if len(group) != len(set(group)):
                raise ValueError(f"Module {self.id}: duplicate names in {label}")
        both = set(names) & set(excluded)
        if both:
            raise ValueError(
                f"Module {self.id}: artifacts both included and excluded: "
                f"{sorted(both)}"
            )
        return self


class Agent(_BuildInfoModel):
    name: str
    version: str = ""


class BuildAgent(_BuildInfoModel):
    name: str
    version: str = ""


class BuildInfo(_BuildInfoModel):
    """The aggregated record of one completed build session."""

    version: str = BUILD_INFO_SCHEMA_VERSION
    name: str
    number: str
    type: str = "MAVEN"
    started: str
    duration_millis: int = 0
    agent: Agent | None = None
    build_agent: BuildAgent | None = None
    principal: str | None = None
    artifactory_principal: str | None = None
    url: str | None = None
    vcs_revision: str | None = None
    parent_name: str | None = None
    parent_number: str | None = None
    modules: list[Module] = Field(default_factory=list)
    properties: dict[str, str] = Field(default_factory=dict)

    def get_module(self, module_id: str) -> Module | None:
        """Return the module with *module_id*, or ``None``."""
        return next((m for m in self.modules if m.id == module_id), None)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize to the build-info JSON wire format."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class BuildRetention(_BuildInfoModel):
    """Discard policy for older builds of the same name.

    ``count`` of -1 keeps any number of builds; ``minimum_build_date`` is in
    epoch milliseconds.
    """

    count: int = -1
    delete_build_artifacts: bool = False
    build_numbers_not_to_be_discarded: list[str] = []
    minimum_build_date: int | None = None

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
