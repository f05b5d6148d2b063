"""HTTP artifact-repository client (Artifactory-compatible REST API).

Uploads
    ``PUT {base_url}/{repository}/{path};key=value;...`` with the file as
    the body and ``X-Checksum-Md5`` / ``X-Checksum-Sha1`` headers.

Build info
    ``PUT {base_url}/api/build`` with the build-info JSON body.

Build retention
    ``POST {base_url}/api/build/retention/{build_name}?async=false`` with the
    retention policy JSON body.

There is no retry or backoff: a failed request raises
``RepositoryClientError`` and the deployer aborts the phase.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from artiforge.bridge.client import RepositoryClientError
from artiforge.models.artifacts import DeployDetails
from artiforge.models.buildinfo import BuildInfo, BuildRetention

logger = logging.getLogger(__name__)

BUILD_INFO_CONTENT_TYPE = "application/vnd.org.jfrog.artifactory+json"


def matrix_params(properties: dict[str, str]) -> str:
    """Encode *properties* as ``;key=value`` matrix parameters."""
    return "".join(
        f";{quote(key, safe='')}={quote(value, safe='')}"
        for key, value in sorted(properties.items())
    )


class HttpRepositoryClient:
    """Artifact-repository client over httpx.

    Parameters
    ----------
    base_url:
        Repository service root, e.g. ``https://repo.example.com/artifactory``.
    auth:
        Passed through to httpx untouched.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth: Any = None,
        timeout: float = 300.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(auth=auth, timeout=timeout, transport=transport)

    def upload(self, details: DeployDetails) -> None:
        url = (
            f"{self.base_url}/{details.target_repository}/"
            f"{quote(details.artifact_path)}{matrix_params(details.properties)}"
        )
        headers = {}
        if details.md5:
            headers["X-Checksum-Md5"] = details.md5
        if details.sha1:
            headers["X-Checksum-Sha1"] = details.sha1

        try:
            content = details.file.read_bytes()
        except OSError as exc:
            raise RepositoryClientError(
                f"Could not read '{details.file}' for upload: {exc}"
            ) from exc

        try:
            response = self._client.put(url, content=content, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RepositoryClientError(
                f"Upload of '{details.artifact_path}' to "
                f"'{details.target_repository}' failed: {exc}"
            ) from exc
        logger.debug("Uploaded %s (%d bytes)", url, len(content))

    def publish_build_info(self, build_info: BuildInfo) -> None:
        url = f"{self.base_url}/api/build"
        try:
            response = self._client.put(
                url,
                json=build_info.to_json_dict(),
                headers={"Content-Type": BUILD_INFO_CONTENT_TYPE},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RepositoryClientError(
                f"Publishing build info {build_info.name}/{build_info.number} "
                f"failed: {exc}"
            ) from exc
        logger.info(
            "Build info %s/%s published to %s",
            build_info.name,
            build_info.number,
            self.base_url,
        )

    def send_build_retention(self, build_name: str, retention: BuildRetention) -> None:
        url = f"{self.base_url}/api/build/retention/{quote(build_name, safe='')}"
        try:
            response = self._client.post(
                url, params={"async": "false"}, json=retention.to_json_dict()
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RepositoryClientError(
                f"Sending build retention for {build_name} failed: {exc}"
            ) from exc
        logger.debug("Build retention for %s sent to %s", build_name, self.base_url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpRepositoryClient:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HttpRepositoryClient(base_url={self.base_url!r})"
