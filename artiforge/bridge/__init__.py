"""Bridge layer between the recorder and an artifact-repository service.

Modules
-------
client
    The ``ArtifactRepositoryClient`` Protocol the deployer depends on, and
    ``RepositoryClientError`` for transport failures.
http_client
    ``HttpRepositoryClient`` — uploads and build-info publication over an
    Artifactory-compatible REST API, via httpx.

The filesystem implementation, ``LocalRepository``, lives in
``artiforge.core.artifact_store``.
"""
