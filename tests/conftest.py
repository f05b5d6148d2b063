"""Shared test fixtures for Artiforge."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from artiforge.core.artifact_store import LocalRepository
from artiforge.core.deployer import ParallelDeployer
from artiforge.core.recorder import BuildInfoRecorder
from artiforge.models.artifacts import DeployDetails, ModuleArtifact
from artiforge.models.buildinfo import BuildInfo, BuildRetention
from artiforge.models.config import BuildInfoConfig, RecorderConfig
from artiforge.models.events import BuildSession, ProjectDescriptor, SessionOutcome

SESSION_START = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


class RecordingClient:
    """In-memory repository client that records every call.

    ``fail_on`` names an artifact path whose upload raises; ``fail_publish``
    makes build-info publication raise; ``fail_retention`` makes the
    retention request raise.
    """

    def __init__(
        self,
        fail_on: str | None = None,
        fail_publish: bool = False,
        fail_retention: bool = False,
    ) -> None:
        self.uploads: list[DeployDetails] = []
        self.published: list[BuildInfo] = []
        self.retentions: list[tuple[str, BuildRetention]] = []
        self.upload_threads: set[str] = set()
        self.closed = False
        self._fail_on = fail_on
        self._fail_publish = fail_publish
        self._fail_retention = fail_retention
        self._lock = threading.Lock()

    def upload(self, details: DeployDetails) -> None:
        if self._fail_on is not None and details.artifact_path == self._fail_on:
            raise ConnectionError(f"connection reset uploading {details.artifact_path}")
        with self._lock:
            self.uploads.append(details)
            self.upload_threads.add(threading.current_thread().name)

    def publish_build_info(self, build_info: BuildInfo) -> None:
        if self._fail_publish:
            raise ConnectionError("build-info endpoint unavailable")
        self.published.append(build_info)

    def send_build_retention(self, build_name: str, retention: BuildRetention) -> None:
        if self._fail_retention:
            raise ConnectionError("retention endpoint unavailable")
        self.retentions.append((build_name, retention))

    def close(self) -> None:
        self.closed = True

    @property
    def uploaded_paths(self) -> list[str]:
        return [d.artifact_path for d in self.uploads]


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def client() -> RecordingClient:
    """Provide a fresh recording repository client."""
    return RecordingClient()


@pytest.fixture
def make_client() -> Callable[..., RecordingClient]:
    """Factory fixture: a recording client with optional failure injection."""
    return RecordingClient


@pytest.fixture
def local_repository(tmp_dir: Path) -> LocalRepository:
    """Provide a LocalRepository rooted in a temp directory."""
    return LocalRepository(tmp_dir / "repository")


@pytest.fixture
def session() -> BuildSession:
    """Provide a session with a fixed start time."""
    return BuildSession(top_level_project="acme-parent", start_time=SESSION_START)


@pytest.fixture
def make_outcome() -> Callable[..., SessionOutcome]:
    """Factory fixture: a session outcome *seconds* after the session start."""

    def _factory(seconds: int = 5, exceptions: list[str] | None = None) -> SessionOutcome:
        return SessionOutcome(
            exceptions=exceptions or [],
            end_time=SESSION_START + timedelta(seconds=seconds),
        )

    return _factory


@pytest.fixture
def config() -> RecorderConfig:
    """Provide a recorder config with a fixed build name and number."""
    return RecorderConfig(
        build_info=BuildInfoConfig(build_name="acme", build_number="42"),
    )


@pytest.fixture
def make_recorder(
    session: BuildSession, config: RecorderConfig, client: RecordingClient
) -> Callable[..., BuildInfoRecorder]:
    """Factory fixture: a recorder wired to the recording client."""

    def _factory(
        config_: RecorderConfig | None = None,
        client_: Any = None,
        **kwargs: Any,
    ) -> BuildInfoRecorder:
        cfg = config_ or config
        deployer = ParallelDeployer(client_ or client, cfg)
        return BuildInfoRecorder(session, cfg, deployer, **kwargs)

    return _factory


# ---------------------------------------------------------------------------
# Artifact and project factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_artifact(tmp_dir: Path) -> Callable[..., ModuleArtifact]:
    """Factory fixture: a ModuleArtifact backed by a real file.

    Pass ``content=None`` for an artifact with no file.
    """

    def _factory(
        artifact_id: str = "core",
        version: str = "1.0.0",
        group_id: str = "com.acme",
        type: str = "jar",
        classifier: str = "",
        content: bytes | None = b"artifact-bytes",
        **overrides: Any,
    ) -> ModuleArtifact:
        file = None
        if content is not None:
            suffix = f"-{classifier}" if classifier else ""
            extension = overrides.get("extension") or type
            file = tmp_dir / "build" / f"{artifact_id}-{version}{suffix}.{extension}"
            file.parent.mkdir(parents=True, exist_ok=True)
            file.write_bytes(content)
        values: dict[str, Any] = {
            "group_id": group_id,
            "artifact_id": artifact_id,
            "version": version,
            "type": type,
            "classifier": classifier,
            "file": file,
        }
        values.update(overrides)
        return ModuleArtifact(**values)

    return _factory


@pytest.fixture
def make_dependency() -> Callable[..., ModuleArtifact]:
    """Factory fixture: a file-less dependency coordinate."""

    def _factory(
        artifact_id: str = "lib",
        version: str = "2.0",
        scope: str = "compile",
        **overrides: Any,
    ) -> ModuleArtifact:
        values: dict[str, Any] = {
            "group_id": "org.example",
            "artifact_id": artifact_id,
            "version": version,
            "scope": scope,
        }
        values.update(overrides)
        return ModuleArtifact(**values)

    return _factory


@pytest.fixture
def make_project(
    tmp_dir: Path, make_artifact: Callable[..., ModuleArtifact]
) -> Callable[..., ProjectDescriptor]:
    """Factory fixture: a jar project with a POM and a built artifact."""

    def _factory(
        artifact_id: str = "core",
        version: str = "1.0.0",
        attached: list[ModuleArtifact] | None = None,
        dependencies: list[ModuleArtifact] | None = None,
        with_artifact: bool = True,
        with_descriptor: bool = True,
        **overrides: Any,
    ) -> ProjectDescriptor:
        pom = tmp_dir / "poms" / artifact_id / "pom.xml"
        pom.parent.mkdir(parents=True, exist_ok=True)
        pom.write_text(f"<project><artifactId>{artifact_id}</artifactId></project>")
        artifact = None
        if with_artifact:
            artifact = make_artifact(
                artifact_id, version, content=f"{artifact_id}-jar".encode(),
                descriptor_file=pom if with_descriptor else None,
            )
        values: dict[str, Any] = {
            "group_id": "com.acme",
            "artifact_id": artifact_id,
            "version": version,
            "file": pom,
            "artifact": artifact,
            "attached_artifacts": attached or [],
            "dependencies": dependencies or [],
        }
        values.update(overrides)
        return ProjectDescriptor(**values)

    return _factory
