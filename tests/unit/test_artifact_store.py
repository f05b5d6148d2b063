"""Unit tests for artiforge.core.artifact_store — the filesystem repository."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path

import pytest

from artiforge.bridge.client import ArtifactRepositoryClient, RepositoryClientError
from artiforge.core.artifact_store import ArtifactIntegrityError, LocalRepository
from artiforge.models.artifacts import DeployDetails
from artiforge.models.buildinfo import BuildInfo, BuildRetention, Module


def _details(file: Path, /, **overrides) -> DeployDetails:
    data = file.read_bytes()
    values = {
        "artifact_path": "com/acme/core/1.0/core-1.0.jar",
        "file": file,
        "target_repository": "libs-release-local",
        "md5": hashlib.md5(data).hexdigest(),
        "sha1": hashlib.sha1(data).hexdigest(),
        "properties": {"build.name": "acme"},
    }
    values.update(overrides)
    return DeployDetails(**values)


@pytest.fixture
def jar(tmp_path: Path) -> Path:
    path = tmp_path / "core-1.0.jar"
    path.write_bytes(b"core classes")
    return path


class TestUpload:

    def test_satisfies_client_protocol(self, local_repository):
        assert isinstance(local_repository, ArtifactRepositoryClient)

    def test_upload_and_retrieve(self, local_repository, jar):
        local_repository.upload(_details(jar))
        assert local_repository.exists("libs-release-local", "com/acme/core/1.0/core-1.0.jar")
        assert local_repository.retrieve(
            "libs-release-local", "com/acme/core/1.0/core-1.0.jar"
        ) == b"core classes"

    def test_properties_sidecar(self, local_repository, jar):
        local_repository.upload(_details(jar))
        assert local_repository.properties(
            "libs-release-local", "com/acme/core/1.0/core-1.0.jar"
        ) == {"build.name": "acme"}

    def test_no_sidecar_without_properties(self, local_repository, jar):
        local_repository.upload(_details(jar, properties={}))
        assert local_repository.properties(
            "libs-release-local", "com/acme/core/1.0/core-1.0.jar"
        ) == {}

    def test_checksum_mismatch_rejected(self, local_repository, jar):
        with pytest.raises(ArtifactIntegrityError, match="sha1 mismatch"):
            local_repository.upload(_details(jar, sha1="0" * 40))

    def test_upload_without_checksums(self, local_repository, jar):
        local_repository.upload(_details(jar, md5=None, sha1=None))
        assert local_repository.exists("libs-release-local", "com/acme/core/1.0/core-1.0.jar")

    def test_missing_source_file(self, local_repository, jar, tmp_path):
        details = _details(jar, file=tmp_path / "gone.jar")
        with pytest.raises(RepositoryClientError, match="Could not store"):
            local_repository.upload(details)

    def test_retrieve_missing(self, local_repository):
        with pytest.raises(FileNotFoundError):
            local_repository.retrieve("libs-release-local", "nope.jar")


class TestBuildInfo:

    def test_publish_and_load(self, local_repository):
        info = BuildInfo(
            name="acme", number="42", started="2026-01-02T03:04:05.678+0000",
            modules=[Module(id="com.acme:core:1.0")],
        )
        local_repository.publish_build_info(info)
        assert local_repository.build_info_path("acme", "42").is_file()
        assert local_repository.load_build_info("acme", "42") == info

    def test_load_missing(self, local_repository):
        with pytest.raises(FileNotFoundError):
            local_repository.load_build_info("acme", "404")


class TestBuildRetention:

    def _publish(self, repository: LocalRepository, *numbers: str) -> None:
        """Publish builds of "acme", oldest first, one minute apart."""
        for minute, number in enumerate(numbers):
            repository.publish_build_info(
                BuildInfo(name="acme", number=number, started="now")
            )
            stamp = 1_700_000_000 + minute * 60
            os.utime(repository.build_info_path("acme", number), (stamp, stamp))

    def _stored(self, repository: LocalRepository) -> list[str]:
        directory = repository.base_path / ".build-info" / "acme"
        return sorted(p.stem for p in directory.glob("*.json"))

    def test_count_keeps_newest(self, local_repository):
        self._publish(local_repository, "1", "2", "3", "4")
        local_repository.send_build_retention("acme", BuildRetention(count=2))
        assert self._stored(local_repository) == ["3", "4"]

    def test_protected_numbers_survive(self, local_repository):
        self._publish(local_repository, "1", "2", "3")
        retention = BuildRetention(count=1, build_numbers_not_to_be_discarded=["1"])
        local_repository.send_build_retention("acme", retention)
        assert self._stored(local_repository) == ["1", "3"]

    def test_minimum_build_date(self, local_repository):
        self._publish(local_repository, "1", "2", "3")
        cutoff = (1_700_000_000 + 60) * 1000
        local_repository.send_build_retention(
            "acme", BuildRetention(minimum_build_date=cutoff)
        )
        assert self._stored(local_repository) == ["2", "3"]

    def test_unknown_build_is_ignored(self, local_repository):
        local_repository.send_build_retention("nothing", BuildRetention(count=1))
