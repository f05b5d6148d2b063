"""Priority merge of a module's dependencies from up to three sources.

Sources, highest priority first:

1. the module's live dependency graph (authoritative scopes; blank scope
   becomes ``compile``)
2. dependencies already accumulated for the module
3. build-time resolved dependencies (only with ``record_all_dependencies``)

Entries are keyed by the structural identity
(group, artifact, version, scope, type, classifier); the first source to
supply a key wins.  Scope is part of the key, so one coordinate can appear
once per scope.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from artiforge.core.hasher import checksums_or_empty
from artiforge.core.layout import file_extension, module_id, type_string
from artiforge.models.artifacts import ModuleArtifact
from artiforge.models.buildinfo import Dependency

COMPILE_SCOPE = "compile"


def normalize_graph_dependency(artifact: ModuleArtifact) -> ModuleArtifact:
    """Re-wrap a graph dependency with a defaulted scope and classifier."""
    return artifact.model_copy(
        update={
            "scope": artifact.scope.strip() or COMPILE_SCOPE,
            "classifier": artifact.classifier or "",
        }
    )


def merge_dependencies(
    graph: Iterable[ModuleArtifact],
    accumulated: Iterable[ModuleArtifact],
    build_time: Iterable[ModuleArtifact] = (),
    *,
    record_all_dependencies: bool = False,
) -> list[ModuleArtifact]:
    """Return one de-duplicated, priority-ordered dependency list."""
    merged: dict[Hashable, ModuleArtifact] = {}
    for artifact in graph:
        normalized = normalize_graph_dependency(artifact)
        merged.setdefault(normalized.identity, normalized)

    sources: list[Iterable[ModuleArtifact]] = [accumulated]
    if record_all_dependencies:
        sources.append(build_time)
    for source in sources:
        for artifact in source:
            merged.setdefault(artifact.identity, artifact)
    return list(merged.values())


def to_dependency(artifact: ModuleArtifact) -> Dependency:
    """Convert a merged dependency into its build-info record.

    Checksums are computed from the resolved file when there is one.
    """
    checksums = checksums_or_empty(artifact.file)
    scope = artifact.scope.strip()
    return Dependency(
        id=module_id(artifact.group_id, artifact.artifact_id, artifact.version),
        type=type_string(
            artifact.type, artifact.classifier, file_extension(artifact.file)
        ),
        scopes=[scope] if scope else [],
        md5=checksums.get("md5"),
        sha1=checksums.get("sha1"),
    )
