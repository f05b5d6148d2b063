"""Replays a recorded session manifest through a BuildInfoRecorder.

Each module is driven on the calling thread in manifest order, emitting
the same event sequence the orchestrator would:

    module started -> artifact resolved* -> dependency observed
                   -> module succeeded | module failed | module skipped

followed by one session-ended event carrying the recorded exceptions.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from artiforge.core.recorder import BuildInfoRecorder
from artiforge.models.events import (
    BuildSession,
    ModuleOutcome,
    SessionManifest,
    SessionOutcome,
)

logger = logging.getLogger(__name__)


class ManifestError(ValueError):
    """Raised when a session manifest cannot be loaded."""


def load_manifest(path: Path) -> SessionManifest:
    """Load a manifest; relative file paths resolve against its directory."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ManifestError(f"Could not read session manifest {path}: {exc}") from exc
    try:
        return SessionManifest.model_validate(
            data, context={"base_dir": path.parent.resolve()}
        )
    except ValueError as exc:
        raise ManifestError(f"Invalid session manifest {path}: {exc}") from exc


def session_for(manifest: SessionManifest) -> BuildSession:
    return BuildSession(
        top_level_project=manifest.top_level_project,
        start_time=manifest.start_time or datetime.now(timezone.utc),
    )


def replay(manifest: SessionManifest, recorder: BuildInfoRecorder) -> None:
    """Drive *recorder* through every event recorded in *manifest*."""
    recorder.on_session_started()
    for entry in manifest.modules:
        project = entry.project
        logger.debug("Replaying %s (%s)", project.module_id, entry.outcome.value)
        if entry.outcome is ModuleOutcome.SKIPPED:
            recorder.on_module_skipped(project)
            continue
        recorder.on_module_started(project)
        for resolved in entry.resolved:
            recorder.on_artifact_resolved(resolved.artifact, resolved.context)
        recorder.on_dependency_observed(project)
        if entry.outcome is ModuleOutcome.SUCCEEDED:
            recorder.on_module_succeeded(project)
        else:
            recorder.on_module_failed(project)
    recorder.on_session_ended(SessionOutcome(exceptions=manifest.exceptions))
