"""Maven repository layout: module ids, artifact names and deployment paths."""

from __future__ import annotations

from pathlib import Path

SNAPSHOT_MARKER = "-SNAPSHOT"

# Types whose build-info type string is the type itself, never the extension.
_TYPE_IS_EXTENSION_EXEMPT = frozenset({"jar", "pom", "ivy"})


def module_id(group_id: str, artifact_id: str, version: str) -> str:
    return f"{group_id}:{artifact_id}:{version}"


def deployable_key(module: str, artifact_name_: str) -> str:
    """Key of an artifact in the session-wide deployable map."""
    return f"{module}:{artifact_name_}"


def artifact_name(
    artifact_id: str, version: str, classifier: str | None, extension: str
) -> str:
    """``artifact-version[-classifier].extension``."""
    name = f"{artifact_id}-{version}"
    if classifier and classifier.strip():
        name += f"-{classifier}"
    return f"{name}.{extension}"


def deployment_path(
    group_id: str,
    artifact_id: str,
    version: str,
    classifier: str | None,
    extension: str,
) -> str:
    """Repository-relative path, e.g. ``group/id/artifact/1.0.0/artifact-1.0.0.jar``."""
    return "/".join(
        [
            group_id.replace(".", "/"),
            artifact_id,
            version,
            artifact_name(artifact_id, version, classifier, extension),
        ]
    )


def type_string(type_: str, classifier: str | None, extension: str | None) -> str:
    """Build-info type of an artifact or dependency.

    ``jar`` is prefixed with a non-blank classifier (``sources-jar``); any
    other type except ``pom`` and ``ivy`` is replaced by a non-blank extension.
    """
    result = type_
    if type_ == "jar" and classifier and classifier.strip():
        result = f"{classifier}-{type_}"
    if type_ not in _TYPE_IS_EXTENSION_EXEMPT and extension and extension.strip():
        result = extension
    return result


def file_extension(path: Path | str | None) -> str:
    if path is None:
        return ""
    return Path(path).suffix.removeprefix(".")


def is_snapshot_path(path: str) -> bool:
    return SNAPSHOT_MARKER in path
