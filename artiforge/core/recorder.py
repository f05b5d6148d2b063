"""Build-info recorder: the session state machine.

Reacts to orchestrator lifecycle events:

- module succeeded: snapshot the worker's pending artifacts and dependencies
  into a Module, append it to the session BuildInfo, clear the worker
- dependency observed / module failed: merge dependencies into the worker's
  pending set (no Module is created)
- session ended: abort if the session reported exceptions, otherwise
  materialize the BuildInfo and hand it to the deployer

Every event is forwarded to the downstream listener afterwards, even when
local processing raises.

States::

    idle -> accumulating -> session_complete
                         -> session_aborted
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Hashable, Mapping
from enum import Enum

from artiforge.core.accumulator import ModuleAccumulator, current_worker
from artiforge.core.build_info_builder import (
    BuildInfoBuilder,
    environment_properties,
    epoch_millis,
)
from artiforge.core.deployer import ParallelDeployer
from artiforge.core.dependency_merger import merge_dependencies, to_dependency
from artiforge.core.listeners import NOOP_LISTENER, ExecutionListener
from artiforge.core.planner import DeployableArtifacts, DeploymentPlanner
from artiforge.models.artifacts import DeployDetails, ModuleArtifact
from artiforge.models.buildinfo import BuildInfo, Module
from artiforge.models.config import RecorderConfig
from artiforge.models.events import BuildSession, ProjectDescriptor, SessionOutcome

logger = logging.getLogger(__name__)

PLUGIN_CONTEXT = "plugin"
BUILD_SCOPE = "build"
PROJECT_SCOPE = "project"


class RecorderState(str, Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"
    SESSION_COMPLETE = "session_complete"
    SESSION_ABORTED = "session_aborted"


TERMINAL_STATES = frozenset({RecorderState.SESSION_COMPLETE, RecorderState.SESSION_ABORTED})


class RecorderStateError(RuntimeError):
    """Raised when an event arrives after the session has ended."""


def _identity(artifact: ModuleArtifact) -> Hashable:
    return artifact.identity


class BuildInfoRecorder(ExecutionListener):
    """Records modules as they complete and deploys at session end.

    Parameters
    ----------
    session:
        Session-wide facts (start time, top-level project).
    config:
        Recorder configuration.
    deployer:
        Deploys artifacts and publishes the build info at session end.
    downstream:
        The listener to forward every event to. Defaults to a no-op.
    environ:
        Environment used for ``include_environment_properties``; defaults to
        ``os.environ``.
    """

    def __init__(
        self,
        session: BuildSession,
        config: RecorderConfig,
        deployer: ParallelDeployer,
        *,
        downstream: ExecutionListener | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._session = session
        self._config = config
        self._deployer = deployer
        self._downstream = downstream or NOOP_LISTENER
        self._environ = environ

        self._builder = BuildInfoBuilder(config, session)
        self.deployables = DeployableArtifacts()
        self._planner = DeploymentPlanner(
            config, self.deployables, self._deploy_properties()
        )

        self._artifacts: ModuleAccumulator[ModuleArtifact] = ModuleAccumulator(_identity)
        self._dependencies: ModuleAccumulator[ModuleArtifact] = ModuleAccumulator(_identity)
        self._build_time: ModuleAccumulator[ModuleArtifact] = ModuleAccumulator(_identity)

        self._state = RecorderState.IDLE
        self._state_lock = threading.Lock()
        self.build_info: BuildInfo | None = None
        self.deployed: list[DeployDetails] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> RecorderState:
        with self._state_lock:
            return self._state

    @property
    def modules(self) -> list[Module]:
        """Modules recorded so far, in completion order."""
        return self._builder.modules

    def pending_dependencies(self, worker: Hashable | None = None) -> list[ModuleArtifact]:
        """The dependencies accumulated for the module on *worker*."""
        return self._dependencies.items(worker)

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------

    def on_session_started(self) -> None:
        self._downstream.on_session_started()

    def on_module_started(self, project: ProjectDescriptor) -> None:
        try:
            self._enter_accumulating()
            self._clear_worker(current_worker())
        finally:
            self._downstream.on_module_started(project)

    def on_dependency_observed(self, project: ProjectDescriptor) -> None:
        try:
            self._enter_accumulating()
            self._merge_dependencies(project, current_worker())
        finally:
            self._downstream.on_dependency_observed(project)

    def on_module_succeeded(self, project: ProjectDescriptor) -> None:
        worker = current_worker()
        try:
            self._enter_accumulating()
            self._artifacts.add_all(project.produced_artifacts, worker)
            self._merge_dependencies(project, worker)
            self._builder.add_module(self._build_module(project, worker))
        finally:
            self._clear_worker(worker)
            self._downstream.on_module_succeeded(project)

    def on_module_failed(self, project: ProjectDescriptor) -> None:
        worker = current_worker()
        try:
            self._enter_accumulating()
            self._merge_dependencies(project, worker)
            self._artifacts.clear(worker)
        finally:
            self._downstream.on_module_failed(project)

    def on_module_skipped(self, project: ProjectDescriptor) -> None:
        self._downstream.on_module_skipped(project)

    def on_artifact_resolved(
        self, artifact: ModuleArtifact | None, context: str = PROJECT_SCOPE
    ) -> None:
        """Record a build-time resolved artifact for the current worker.

        Ignored unless ``record_all_dependencies`` is set.  Resolution for
        tooling (``context == "plugin"``) is recorded with scope ``build``.
        """
        if artifact is None or not self._config.record_all_dependencies:
            return
        scope = BUILD_SCOPE if context == PLUGIN_CONTEXT else PROJECT_SCOPE
        self._build_time.add(artifact.model_copy(update={"scope": scope}))

    def on_session_ended(self, outcome: SessionOutcome) -> None:
        try:
            build_info = self.extract(outcome)
            if build_info is not None:
                self.deployed = self._deployer.deploy(
                    build_info, self.deployables.snapshot()
                )
        finally:
            self.deployables.clear()
            self._downstream.on_session_ended(outcome)

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, outcome: SessionOutcome) -> BuildInfo | None:
        """Materialize the BuildInfo, or return ``None`` if the session failed.

        The recorder only becomes ``session_complete`` once the BuildInfo has
        been built; a failure while building leaves it accumulating.
        """
        with self._state_lock:
            if self._state in TERMINAL_STATES:
                raise RecorderStateError(
                    f"Session already ended ({self._state.value})"
                )
            if outcome.has_exceptions:
                self._state = RecorderState.SESSION_ABORTED

        if outcome.has_exceptions:
            logger.info(
                "Session reported %d exception(s), build info will not be produced",
                len(outcome.exceptions),
            )
            return None

        if self._config.include_environment_properties:
            environ = os.environ if self._environ is None else self._environ
            self._builder.add_properties(
                environment_properties(
                    environ,
                    self._config.env_include_patterns,
                    self._config.env_exclude_patterns,
                )
            )
        # Naive datetimes are taken as UTC on either side.
        elapsed = epoch_millis(outcome.end_time) - epoch_millis(self._session.start_time)
        build_info = self._builder.build(elapsed)
        with self._state_lock:
            if self._state in TERMINAL_STATES:
                raise RecorderStateError(
                    f"Session already ended ({self._state.value})"
                )
            self._state = RecorderState.SESSION_COMPLETE
            self.build_info = build_info
        return build_info

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _enter_accumulating(self) -> None:
        with self._state_lock:
            if self._state in TERMINAL_STATES:
                raise RecorderStateError(
                    f"Module event received after session ended ({self._state.value})"
                )
            self._state = RecorderState.ACCUMULATING

    def _merge_dependencies(self, project: ProjectDescriptor, worker: Hashable) -> None:
        merged = merge_dependencies(
            project.dependencies,
            self._dependencies.items(worker),
            self._build_time.items(worker),
            record_all_dependencies=self._config.record_all_dependencies,
        )
        self._dependencies.replace(merged, worker)

    def _build_module(self, project: ProjectDescriptor, worker: Hashable) -> Module:
        plan = self._planner.plan(project, self._artifacts.items(worker))
        return Module(
            id=project.module_id,
            properties=project.properties,
            artifacts=plan.artifacts,
            excluded_artifacts=plan.excluded_artifacts,
            dependencies=[to_dependency(d) for d in self._dependencies.items(worker)],
        )

    def _clear_worker(self, worker: Hashable) -> None:
        self._artifacts.clear(worker)
        self._dependencies.clear(worker)
        self._build_time.clear(worker)

    def _deploy_properties(self) -> dict[str, str]:
        """Properties attached to every uploaded artifact."""
        properties = {
            "build.timestamp": str(epoch_millis(self._session.start_time)),
            "build.name": self._builder.name,
            "build.number": self._builder.number,
        }
        properties.update(self._config.deploy_properties)
        return {k: v for k, v in properties.items() if v and v.strip()}
