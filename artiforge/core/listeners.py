"""Execution listener hooks and the no-op downstream listener.

The recorder wraps whatever listener the orchestrator had installed and
forwards every event to it after its own processing.  "No listener" is
``NOOP_LISTENER``, so forwarding never needs a null check.
"""

from __future__ import annotations

from artiforge.models.events import ProjectDescriptor, SessionOutcome


class ExecutionListener:
    """Build-orchestrator lifecycle hooks. Every hook defaults to a no-op."""

    def on_session_started(self) -> None:
        pass

    def on_module_started(self, project: ProjectDescriptor) -> None:
        pass

    def on_dependency_observed(self, project: ProjectDescriptor) -> None:
        pass

    def on_module_succeeded(self, project: ProjectDescriptor) -> None:
        pass

    def on_module_failed(self, project: ProjectDescriptor) -> None:
        pass

    def on_module_skipped(self, project: ProjectDescriptor) -> None:
        pass

    def on_session_ended(self, outcome: SessionOutcome) -> None:
        pass


NOOP_LISTENER = ExecutionListener()
