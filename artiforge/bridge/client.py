"""Artifact-repository client protocol.

The deployer depends only on this Protocol.  Two implementations ship:

1. ``HttpRepositoryClient`` — REST uploads over httpx.
2. ``LocalRepository`` — a filesystem repository layout, for local runs and
   tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from artiforge.models.artifacts import DeployDetails
from artiforge.models.buildinfo import BuildInfo, BuildRetention


class RepositoryClientError(RuntimeError):
    """Raised when an upload or build-info publication fails."""


@runtime_checkable
class ArtifactRepositoryClient(Protocol):
    """Anything that can upload deployables and publish a build-info record."""

    def upload(self, details: DeployDetails) -> None:
        """Upload ``details.file`` to ``details.target_repository``.

        Raises
        ------
        RepositoryClientError
            If the repository rejects or cannot receive the file.
        """
        ...

    def publish_build_info(self, build_info: BuildInfo) -> None:
        """Publish the aggregated build-info record."""
        ...

    def send_build_retention(self, build_name: str, retention: BuildRetention) -> None:
        """Ask the repository to discard older builds of *build_name*."""
        ...

    def close(self) -> None:
        ...
