"""Recorder and publisher configuration models."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ENV_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "*password*",
    "*psw*",
    "*secret*",
    "*key*",
    "*token*",
    "*auth*",
)


def split_patterns(value: object) -> object:
    """Accept ``"a, b,c"`` as well as a list of patterns."""
    if value is None:
        return []
    if isinstance(value, str):
        return [p.strip() for p in value.split(",") if p.strip()]
    return value


def split_properties(value: object) -> object:
    """Accept ``"a=1, b=2"`` as well as a mapping."""
    if value is None:
        return {}
    if not isinstance(value, str):
        return value
    properties: dict[str, str] = {}
    for entry in value.split(","):
        if not entry.strip():
            continue
        key, sep, val = entry.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected key=value, got {entry.strip()!r}")
        properties[key.strip()] = val.strip()
    return properties


class BuildInfoConfig(BaseModel):
    """Build-info header and retention settings.

    Blank header values are resolved at session start.  Retention is only
    sent when ``retention_max_builds`` or ``retention_max_days`` is set.
    """

    model_config = ConfigDict(frozen=True)

    build_name: str = ""
    build_number: str = ""
    build_started: str = ""
    build_url: str = ""
    vcs_revision: str = ""
    principal: str = ""
    artifactory_principal: str = ""
    parent_build_name: str = ""
    parent_build_number: str = ""
    agent_name: str = ""
    agent_version: str = ""
    build_agent_version: str = ""
    properties: dict[str, str] = {}

    retention_max_builds: int | None = Field(default=None, ge=1)
    retention_max_days: int | None = Field(default=None, ge=0)
    retention_delete_artifacts: bool = False
    retention_builds_not_to_discard: list[str] = []

    @field_validator("properties", mode="before")
    @classmethod
    def accept_key_value_string(cls, value: object) -> object:
        return split_properties(value)

    @field_validator("retention_builds_not_to_discard", mode="before")
    @classmethod
    def accept_comma_separated(cls, value: object) -> object:
        return split_patterns(value)

    @property
    def retention_enabled(self) -> bool:
        return self.retention_max_builds is not None or self.retention_max_days is not None


class RecorderConfig(BaseModel):
    """Everything the recorder, planner and deployer consume.

    Patterns may be given as lists or as comma-separated strings.
    """

    model_config = ConfigDict(frozen=True)

    publish_artifacts: bool = True
    publish_build_info: bool = True
    include_patterns: list[str] = []
    exclude_patterns: list[str] = []
    filter_excluded_artifacts_from_build: bool = True
    snapshot_repository_key: str | None = None
    release_repository_key: str = "libs-release-local"
    record_all_dependencies: bool = False
    deploy_concurrency: int = Field(default=3, ge=1)
    include_environment_properties: bool = False
    env_include_patterns: list[str] = ["*"]
    env_exclude_patterns: list[str] = list(DEFAULT_ENV_EXCLUDE_PATTERNS)
    deploy_properties: dict[str, str] = {}
    deployable_artifacts_file: Path | None = None
    build_info: BuildInfoConfig = BuildInfoConfig()

    @field_validator(
        "include_patterns",
        "exclude_patterns",
        "env_include_patterns",
        "env_exclude_patterns",
        mode="before",
    )
    @classmethod
    def accept_comma_separated(cls, value: object) -> object:
        return split_patterns(value)

    @field_validator("deploy_properties", mode="before")
    @classmethod
    def accept_key_value_string(cls, value: object) -> object:
        return split_properties(value)

    @field_validator("snapshot_repository_key", mode="before")
    @classmethod
    def blank_snapshot_repository(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
