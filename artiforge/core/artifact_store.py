"""Filesystem artifact repository.

Storage layout::

    {base_path}/{repository}/{artifact_path}
    {base_path}/{repository}/{artifact_path}.properties.json
    {base_path}/.build-info/{build_name}/{build_number}.json

Uploaded bytes are re-hashed after writing and compared against the
checksums carried by the DeployDetails.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from artiforge.bridge.client import RepositoryClientError
from artiforge.core.hasher import ChecksumError, calculate_checksums
from artiforge.models.artifacts import DeployDetails
from artiforge.models.buildinfo import BuildInfo, BuildRetention

logger = logging.getLogger(__name__)

BUILD_INFO_DIR = ".build-info"


class ArtifactIntegrityError(RepositoryClientError):
    """Raised when stored bytes do not match the expected checksums."""


class LocalRepository:
    """Artifact repository backed by a local directory.

    Parameters
    ----------
    base_path:
        Root directory; one sub-directory per repository key.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    def _location(self, repository: str, artifact_path: str) -> Path:
        """Resolve a repository-relative path, refusing to leave the base."""
        base = self._base.resolve()
        repo_root = (base / repository).resolve()
        target = (repo_root / artifact_path).resolve()
        if (
            repo_root == base
            or not repo_root.is_relative_to(base)
            or not target.is_relative_to(repo_root)
            or target == repo_root
        ):
            raise RepositoryClientError(
                f"Illegal deployment path: {repository}/{artifact_path}"
            )
        return target

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def upload(self, details: DeployDetails) -> None:
        target = self._location(details.target_repository, details.artifact_path)
        try:
            data = details.file.read_bytes()
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise RepositoryClientError(
                f"Could not store '{details.artifact_path}': {exc}"
            ) from exc

        try:
            stored = calculate_checksums(target)
        except ChecksumError as exc:
            raise RepositoryClientError(str(exc)) from exc
        for name, expected in details.checksums.items():
            if stored.get(name) != expected:
                raise ArtifactIntegrityError(
                    f"{name} mismatch for {details.target_repository}/"
                    f"{details.artifact_path}: expected {expected}, "
                    f"stored {stored.get(name)}"
                )

        if details.properties:
            sidecar = target.with_name(target.name + ".properties.json")
            sidecar.write_text(
                json.dumps(details.properties, sort_keys=True, indent=2),
                encoding="utf-8",
            )
        logger.debug("Stored %s/%s", details.target_repository, details.artifact_path)

    # ------------------------------------------------------------------
    # Build info
    # ------------------------------------------------------------------

    def build_info_path(self, name: str, number: str) -> Path:
        return self._location(BUILD_INFO_DIR, f"{name}/{number}.json")

    def publish_build_info(self, build_info: BuildInfo) -> None:
        path = self.build_info_path(build_info.name, build_info.number)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(build_info.to_json_dict(), indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise RepositoryClientError(
                f"Could not store build info {build_info.name}/{build_info.number}: {exc}"
            ) from exc

    def send_build_retention(self, build_name: str, retention: BuildRetention) -> None:
        """Discard stored build-info records of *build_name* per *retention*.

        Records are ranked newest first by modification time.  A record is
        discarded when it ranks past ``count`` or is older than
        ``minimum_build_date``, unless its number is protected.  Stored
        artifacts are never deleted here.
        """
        directory = self._location(BUILD_INFO_DIR, build_name)
        if not directory.is_dir():
            return
        protected = set(retention.build_numbers_not_to_be_discarded)
        try:
            records = sorted(
                (
                    (path, path.stat().st_mtime_ns // 1_000_000)
                    for path in directory.glob("*.json")
                ),
                key=lambda record: record[1],
                reverse=True,
            )
            for rank, (path, modified) in enumerate(records):
                if path.stem in protected:
                    continue
                too_many = 0 <= retention.count <= rank
                too_old = (
                    retention.minimum_build_date is not None
                    and modified < retention.minimum_build_date
                )
                if too_many or too_old:
                    path.unlink()
                    logger.info("Discarded build info %s/%s", build_name, path.stem)
        except OSError as exc:
            raise RepositoryClientError(
                f"Could not apply build retention for {build_name}: {exc}"
            ) from exc

    def load_build_info(self, name: str, number: str) -> BuildInfo:
        path = self.build_info_path(name, number)
        if not path.exists():
            raise FileNotFoundError(f"Build info not found: {name}/{number}")
        return BuildInfo.model_validate_json(path.read_text(encoding="utf-8"))

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def exists(self, repository: str, artifact_path: str) -> bool:
        return self._location(repository, artifact_path).is_file()

    def retrieve(self, repository: str, artifact_path: str) -> bytes:
        target = self._location(repository, artifact_path)
        if not target.is_file():
            raise FileNotFoundError(f"Artifact not found: {repository}/{artifact_path}")
        return target.read_bytes()

    def properties(self, repository: str, artifact_path: str) -> dict[str, Any]:
        target = self._location(repository, artifact_path)
        sidecar = target.with_name(target.name + ".properties.json")
        if not sidecar.exists():
            return {}
        return json.loads(sidecar.read_text(encoding="utf-8"))

    def close(self) -> None:
        pass
