"""Environment-driven configuration.

Reads ``ARTIFORGE_*`` environment variables and a ``.env`` file, and turns
them into the frozen ``RecorderConfig`` the recorder consumes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from artiforge.models.config import (
    DEFAULT_ENV_EXCLUDE_PATTERNS,
    BuildInfoConfig,
    RecorderConfig,
    split_patterns,
    split_properties,
)

PatternList = Annotated[list[str], NoDecode]
PropertyMap = Annotated[dict[str, str], NoDecode]


class ProdConfig(BaseSettings):
    """Settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export ARTIFORGE_RELEASE_REPOSITORY_KEY=libs-release-local
        export ARTIFORGE_SNAPSHOT_REPOSITORY_KEY=libs-snapshot-local
        export ARTIFORGE_EXCLUDE_PATTERNS="*-tests.jar,*-sources.jar"
        export ARTIFORGE_DEPLOY_CONCURRENCY=6
        export ARTIFORGE_DEPLOY_PROPERTIES="team=core,stage=ci"
        export ARTIFORGE_RETENTION_MAX_BUILDS=20

    Or via .env file::

        ARTIFORGE_REPOSITORY_URL=https://repo.example.com/artifactory
        ARTIFORGE_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ARTIFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    repository_url: str = ""

    # Publisher
    publish_artifacts: bool = True
    publish_build_info: bool = True
    include_patterns: PatternList = []
    exclude_patterns: PatternList = []
    filter_excluded_artifacts_from_build: bool = True
    snapshot_repository_key: str = ""
    release_repository_key: str = "libs-release-local"
    record_all_dependencies: bool = False
    deploy_concurrency: int = Field(default=3, ge=1)
    deploy_properties: PropertyMap = {}
    deployable_artifacts_file: Path | None = None

    # Build info
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
    build_properties: PropertyMap = {}
    include_environment_properties: bool = False
    env_include_patterns: PatternList = ["*"]
    env_exclude_patterns: PatternList = list(DEFAULT_ENV_EXCLUDE_PATTERNS)

    # Build retention
    retention_max_builds: int | None = Field(default=None, ge=1)
    retention_max_days: int | None = Field(default=None, ge=0)
    retention_delete_artifacts: bool = False
    retention_builds_not_to_discard: PatternList = []

    @field_validator(
        "include_patterns",
        "exclude_patterns",
        "env_include_patterns",
        "env_exclude_patterns",
        "retention_builds_not_to_discard",
        mode="before",
    )
    @classmethod
    def accept_comma_separated(cls, value: object) -> object:
        return split_patterns(value)

    @field_validator("deploy_properties", "build_properties", mode="before")
    @classmethod
    def accept_key_value_string(cls, value: object) -> object:
        return split_properties(value)

    def to_recorder_config(self, **overrides: object) -> RecorderConfig:
        """Build the frozen recorder configuration, applying *overrides*."""
        values: dict[str, object] = {
            "publish_artifacts": self.publish_artifacts,
            "publish_build_info": self.publish_build_info,
            "include_patterns": self.include_patterns,
            "exclude_patterns": self.exclude_patterns,
            "filter_excluded_artifacts_from_build": self.filter_excluded_artifacts_from_build,
            "snapshot_repository_key": self.snapshot_repository_key,
            "release_repository_key": self.release_repository_key,
            "record_all_dependencies": self.record_all_dependencies,
            "deploy_concurrency": self.deploy_concurrency,
            "deploy_properties": self.deploy_properties,
            "include_environment_properties": self.include_environment_properties,
            "env_include_patterns": self.env_include_patterns,
            "env_exclude_patterns": self.env_exclude_patterns,
            "deployable_artifacts_file": self.deployable_artifacts_file,
            "build_info": BuildInfoConfig(
                build_name=self.build_name,
                build_number=self.build_number,
                build_started=self.build_started,
                build_url=self.build_url,
                vcs_revision=self.vcs_revision,
                principal=self.principal,
                artifactory_principal=self.artifactory_principal,
                parent_build_name=self.parent_build_name,
                parent_build_number=self.parent_build_number,
                agent_name=self.agent_name,
                agent_version=self.agent_version,
                build_agent_version=self.build_agent_version,
                properties=self.build_properties,
                retention_max_builds=self.retention_max_builds,
                retention_max_days=self.retention_max_days,
                retention_delete_artifacts=self.retention_delete_artifacts,
                retention_builds_not_to_discard=self.retention_builds_not_to_discard,
            ),
        }
        values.update(overrides)
        return RecorderConfig(**values)
