"""Deployment planning for a completed module.

Turns a module's accumulated artifacts into two independent outputs:

- the Module's artifact / excluded-artifact lists for the build-info record
- entries in the session-wide deployable map

Build-info visibility and deployability are gated separately.  A path that
conflicts with the include/exclude patterns is never deployed; whether it
is listed as excluded or as a normal artifact depends on
``filter_excluded_artifacts_from_build``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from artiforge.core.hasher import checksums_or_empty, is_file
from artiforge.core.layout import (
    artifact_name,
    deployable_key,
    deployment_path,
    is_snapshot_path,
    type_string,
)
from artiforge.core.patterns import IncludeExcludePatterns, path_conflicts
from artiforge.models.artifacts import DeployDetails, ModuleArtifact
from artiforge.models.buildinfo import Artifact
from artiforge.models.config import RecorderConfig
from artiforge.models.events import ProjectDescriptor

logger = logging.getLogger(__name__)

DESCRIPTOR_TYPE = "pom"


class DeployableArtifacts:
    """Session-wide map of ``module_id:artifact_name`` -> DeployDetails.

    Written concurrently by module-completion handlers; read once at
    session end after all writers are done.
    """

    def __init__(self) -> None:
        self._items: dict[str, DeployDetails] = {}
        self._lock = threading.Lock()

    def put(self, key: str, details: DeployDetails) -> None:
        with self._lock:
            self._items[key] = details

    def get(self, key: str) -> DeployDetails | None:
        with self._lock:
            return self._items.get(key)

    def snapshot(self) -> dict[str, DeployDetails]:
        with self._lock:
            return dict(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items


class ModulePlan(BaseModel):
    """Build-info artifact lists produced for one module."""

    model_config = ConfigDict(frozen=True)

    artifacts: list[Artifact] = []
    excluded_artifacts: list[Artifact] = []


class DeploymentPlanner:
    """Plans build-info artifacts and deployable items for modules.

    Parameters
    ----------
    config:
        Recorder configuration (patterns, repositories, filter flag).
    deployables:
        The session-wide deployable map this planner writes into.
    deploy_properties:
        Property bag attached to every deployable item.
    """

    def __init__(
        self,
        config: RecorderConfig,
        deployables: DeployableArtifacts,
        deploy_properties: dict[str, str] | None = None,
    ) -> None:
        self._config = config
        self._deployables = deployables
        self._deploy_properties = dict(deploy_properties or {})
        self._patterns = IncludeExcludePatterns(
            include=config.include_patterns, exclude=config.exclude_patterns
        )

    @property
    def patterns(self) -> IncludeExcludePatterns:
        return self._patterns

    def target_repository(self, path: str) -> str:
        """Snapshot repository for snapshot paths when configured, else release."""
        snapshot_repo = self._config.snapshot_repository_key
        if snapshot_repo is not None and is_snapshot_path(path):
            return snapshot_repo
        return self._config.release_repository_key

    def plan(
        self,
        project: ProjectDescriptor,
        artifacts: Iterable[ModuleArtifact],
    ) -> ModulePlan:
        """Plan the artifacts of *project*; deployables go to the shared map."""
        built: list[Artifact] = []
        excluded: list[Artifact] = []
        seen: set[str] = set()

        descriptor_added = False
        descriptor_source: ModuleArtifact | None = None
        descriptor_name = ""

        for module_artifact in artifacts:
            extension = module_artifact.file_extension
            type_ = type_string(
                module_artifact.type, module_artifact.classifier, extension
            )
            name = artifact_name(
                module_artifact.artifact_id,
                module_artifact.version,
                module_artifact.classifier,
                extension,
            )
            artifact_file = module_artifact.file

            if type_ == DESCRIPTOR_TYPE:
                descriptor_added = True
                # A POM-packaged project's own artifact is its project file.
                if (
                    project.artifact is not None
                    and module_artifact.identity == project.artifact.identity
                ):
                    artifact_file = project.file
            elif module_artifact.descriptor_file is not None:
                descriptor_source = module_artifact
                descriptor_name = name.removesuffix(extension) + DESCRIPTOR_TYPE

            if not is_file(artifact_file) or name in seen:
                continue
            seen.add(name)
            path = deployment_path(
                module_artifact.group_id,
                module_artifact.artifact_id,
                module_artifact.version,
                module_artifact.classifier,
                extension,
            )
            self._record(project, name, type_, artifact_file, path, built, excluded)

        if not descriptor_added and descriptor_source is not None:
            self._record_descriptor(
                project, descriptor_source, descriptor_name, seen, built, excluded
            )

        return ModulePlan(artifacts=built, excluded_artifacts=excluded)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _record_descriptor(
        self,
        project: ProjectDescriptor,
        source: ModuleArtifact,
        name: str,
        seen: set[str],
        built: list[Artifact],
        excluded: list[Artifact],
    ) -> None:
        """Synthesize the POM artifact from a non-POM artifact's metadata."""
        descriptor_file = source.descriptor_file
        if not is_file(descriptor_file) or name in seen:
            logger.debug("No descriptor file found for module %s", project.module_id)
            return
        seen.add(name)
        path = deployment_path(
            source.group_id,
            source.artifact_id,
            source.version,
            source.classifier,
            DESCRIPTOR_TYPE,
        )
        self._record(
            project, name, DESCRIPTOR_TYPE, descriptor_file, path, built, excluded
        )

    def _record(
        self,
        project: ProjectDescriptor,
        name: str,
        type_: str,
        artifact_file: Path,
        path: str,
        built: list[Artifact],
        excluded: list[Artifact],
    ) -> None:
        checksums = checksums_or_empty(artifact_file)
        artifact = Artifact(
            name=name,
            type=type_,
            md5=checksums.get("md5"),
            sha1=checksums.get("sha1"),
        )
        conflicts = path_conflicts(path, self._patterns)

        if conflicts and self._config.filter_excluded_artifacts_from_build:
            excluded.append(artifact)
        else:
            built.append(artifact)

        if conflicts:
            logger.info(
                "'%s' will not be deployed due to the defined include-exclude patterns.",
                name,
            )
            return

        details = DeployDetails(
            artifact_path=path,
            file=artifact_file,
            target_repository=self.target_repository(path),
            md5=artifact.md5,
            sha1=artifact.sha1,
            properties=self._deploy_properties,
        )
        self._deployables.put(deployable_key(project.module_id, name), details)
