"""Artiforge data models. All Pydantic v2, all frozen (immutable)."""

from artiforge.models.artifacts import DeployDetails, ModuleArtifact
from artiforge.models.buildinfo import (
    Agent,
    Artifact,
    BuildAgent,
    BuildInfo,
    BuildRetention,
    Dependency,
    Module,
)
from artiforge.models.config import BuildInfoConfig, RecorderConfig
from artiforge.models.events import (
    BuildSession,
    ManifestEntry,
    ModuleOutcome,
    ProjectDescriptor,
    ResolvedArtifact,
    SessionManifest,
    SessionOutcome,
)

__all__ = [
    # artifacts
    "ModuleArtifact",
    "DeployDetails",
    # build info
    "Agent",
    "Artifact",
    "BuildAgent",
    "BuildInfo",
    "BuildRetention",
    "Dependency",
    "Module",
    # events
    "BuildSession",
    "ManifestEntry",
    "ModuleOutcome",
    "ProjectDescriptor",
    "ResolvedArtifact",
    "SessionManifest",
    "SessionOutcome",
    # config
    "BuildInfoConfig",
    "RecorderConfig",
]
