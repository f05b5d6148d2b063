"""Parallel deployment of a session's artifacts and its build-info record.

Deployables are grouped by module in build-info module order.  Module groups
are uploaded by a bounded worker pool (one worker handles all of a module's
uploads); the pool is fully drained before the build-info record is
published, followed by the build retention policy when one is configured.
Any failure aborts the phase and is raised as a single
``DeploymentError`` naming the phase.  Uploads that already succeeded are
neither retried nor rolled back.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum

from artiforge.bridge.client import ArtifactRepositoryClient
from artiforge.core.build_info_builder import build_retention
from artiforge.core.layout import deployable_key
from artiforge.models.artifacts import DeployDetails
from artiforge.models.buildinfo import BuildInfo, Module
from artiforge.models.config import RecorderConfig

logger = logging.getLogger(__name__)


class DeployPhase(str, Enum):
    ARTIFACT_UPLOAD = "artifact upload"
    BUILD_INFO_PUBLISH = "build-info publish"


class DeploymentError(RuntimeError):
    """The deployment phase failed. ``phase`` says where; the cause is chained."""

    def __init__(self, phase: DeployPhase, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"Deployment failed during {phase.value}: {cause}")


def group_by_module(
    modules: list[Module], deployables: Mapping[str, DeployDetails]
) -> dict[str, list[DeployDetails]]:
    """Deployables per module id, preserving module and artifact order.

    Modules without deployables are omitted.
    """
    grouped: dict[str, list[DeployDetails]] = {}
    for module in modules:
        items = [
            deployables[key]
            for key in (deployable_key(module.id, a.name) for a in module.artifacts)
            if key in deployables
        ]
        if items:
            grouped[module.id] = items
    return grouped


class ParallelDeployer:
    """Uploads deployables with up to ``deploy_concurrency`` workers.

    Parameters
    ----------
    client:
        The artifact-repository client.
    config:
        Supplies the publish flags, concurrency limit and report file.
    """

    def __init__(
        self, client: ArtifactRepositoryClient, config: RecorderConfig
    ) -> None:
        self._client = client
        self._config = config

    def deploy(
        self, build_info: BuildInfo, deployables: Mapping[str, DeployDetails]
    ) -> list[DeployDetails]:
        """Upload artifacts, then publish *build_info*.

        Returns the uploaded items (empty if artifact upload was skipped).

        Raises
        ------
        DeploymentError
            On any upload or publication failure.
        """
        grouped = group_by_module(build_info.modules, deployables)
        deploy_artifacts = self._should_deploy_artifacts(grouped)
        publish_build_info = self._should_publish_build_info()
        if not deploy_artifacts and not publish_build_info:
            return []

        deployed: list[DeployDetails] = []
        if deploy_artifacts:
            logger.debug(
                "Publication fork count: %d", self._config.deploy_concurrency
            )
            deployed = self._upload_all(grouped)
            self._write_report(deployed)

        if publish_build_info:
            logger.info("Deploying build info ...")
            retention = build_retention(self._config.build_info)
            try:
                self._client.publish_build_info(build_info)
                if retention is not None:
                    logger.info("Sending build retention for %s ...", build_info.name)
                    self._client.send_build_retention(build_info.name, retention)
            except Exception as exc:
                raise DeploymentError(DeployPhase.BUILD_INFO_PUBLISH, exc) from exc
        return deployed

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _should_deploy_artifacts(self, grouped: dict[str, list[DeployDetails]]) -> bool:
        if not self._config.publish_artifacts:
            logger.info("Deploy artifacts set to false, artifacts will not be deployed...")
            return False
        if not grouped:
            logger.info("No artifacts to deploy...")
            return False
        return True

    def _should_publish_build_info(self) -> bool:
        if not self._config.publish_build_info:
            logger.info(
                "Publish build info set to false, build info will not be published..."
            )
            return False
        return True

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def _upload_all(
        self, grouped: dict[str, list[DeployDetails]]
    ) -> list[DeployDetails]:
        workers = min(self._config.deploy_concurrency, len(grouped))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="artiforge-deploy"
        ) as executor:
            futures = {
                executor.submit(self._upload_module, module_id, items): module_id
                for module_id, items in grouped.items()
            }
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception as exc:
                for pending in futures:
                    pending.cancel()
                raise DeploymentError(DeployPhase.ARTIFACT_UPLOAD, exc) from exc
        return [item for items in grouped.values() for item in items]

    def _upload_module(self, module_id: str, items: list[DeployDetails]) -> None:
        for details in items:
            logger.debug(
                "Deploying %s to %s (module %s)",
                details.artifact_path,
                details.target_repository,
                module_id,
            )
            self._client.upload(details)

    def _write_report(self, deployed: list[DeployDetails]) -> None:
        path = self._config.deployable_artifacts_file
        if path is None:
            return
        report = [
            {
                "sourcePath": str(d.file),
                "artifactPath": d.artifact_path,
                "targetRepository": d.target_repository,
                "md5": d.md5,
                "sha1": d.sha1,
            }
            for d in deployed
        ]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        except OSError as exc:
            raise DeploymentError(DeployPhase.ARTIFACT_UPLOAD, exc) from exc
