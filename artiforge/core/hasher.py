"""File checksum helpers for artifacts and dependencies.

Two digests are computed per file (MD5 and SHA-1), matching what artifact
repositories verify on upload.  Missing or non-regular files yield no
checksums at all; read or algorithm failures raise ``ChecksumError`` from
``calculate_checksums`` and are logged (never raised) by
``checksums_or_empty``.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHMS: tuple[str, ...] = ("md5", "sha1")

_CHUNK_SIZE = 64 * 1024


class ChecksumError(RuntimeError):
    """Raised when a file digest cannot be computed."""


def is_file(path: Path | str | None) -> bool:
    """Return True if *path* names an existing regular file."""
    return path is not None and Path(path).is_file()


def calculate_checksums(
    path: Path | str | None, algorithms: Iterable[str] = DEFAULT_ALGORITHMS
) -> dict[str, str]:
    """Return ``{algorithm: hex digest}`` for the bytes of *path*.

    Returns an empty dict when *path* is not a regular file.
    """
    if not is_file(path):
        return {}
    try:
        digests = {
            name: hashlib.new(name, usedforsecurity=False) for name in algorithms
        }
    except ValueError as exc:
        raise ChecksumError(f"Unsupported digest algorithm: {exc}") from exc

    try:
        with open(path, "rb") as fh:
            for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
                for digest in digests.values():
                    digest.update(chunk)
    except OSError as exc:
        raise ChecksumError(f"Could not read '{path}': {exc}") from exc

    return {name: digest.hexdigest() for name, digest in digests.items()}


def checksums_or_empty(
    path: Path | str | None, algorithms: Iterable[str] = DEFAULT_ALGORITHMS
) -> dict[str, str]:
    """Like ``calculate_checksums`` but logs failures and returns ``{}``."""
    try:
        return calculate_checksums(path, algorithms)
    except ChecksumError as exc:
        logger.error(
            "Could not set checksum values on '%s': %s", path, exc, exc_info=exc
        )
        return {}
