"""Accumulates the session's BuildInfo and resolves its header fields.

Header resolution:

- name: configured build name, else the top-level project name
- number: configured build number, else the session start in epoch millis
- started: configured value, else the session start time formatted as
  ``yyyy-MM-dd'T'HH:mm:ss.SSS+hhmm``
- agent: configured agent, else ``artiforge/<version>``

``build_retention`` turns the configured retention settings into the policy
sent after the build info is published.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone

from artiforge.core.patterns import matches_any
from artiforge.models.buildinfo import Agent, BuildAgent, BuildInfo, BuildRetention, Module
from artiforge.models.config import BuildInfoConfig, RecorderConfig
from artiforge.models.events import BuildSession

logger = logging.getLogger(__name__)

ENV_PROPERTY_PREFIX = "buildInfo.env."
DEFAULT_AGENT_NAME = "artiforge"
BUILD_AGENT_NAME = "Maven"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_build_started(moment: datetime) -> str:
    """``2026-01-02T03:04:05.678+0000`` (millisecond precision, numeric offset)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    millis = moment.microsecond // 1000
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{millis:03d}{moment:%z}"


def epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


def environment_properties(
    environ: Mapping[str, str],
    include_patterns: list[str],
    exclude_patterns: list[str],
) -> dict[str, str]:
    """Filter *environ* into ``buildInfo.env.*`` properties.

    Names are matched case-insensitively; an empty include list includes all.
    """
    result: dict[str, str] = {}
    for name, value in environ.items():
        if include_patterns and not matches_any(
            name, include_patterns, case_sensitive=False
        ):
            continue
        if matches_any(name, exclude_patterns, case_sensitive=False):
            continue
        result[ENV_PROPERTY_PREFIX + name] = value
    return result


def build_retention(
    info: BuildInfoConfig, now: datetime | None = None
) -> BuildRetention | None:
    """The retention policy configured in *info*, or ``None`` if there is none.

    ``retention_max_days`` becomes a minimum build date counted back from
    *now* (default: the current UTC time).
    """
    if not info.retention_enabled:
        return None
    minimum_build_date = None
    if info.retention_max_days is not None:
        now = now or datetime.now(timezone.utc)
        minimum_build_date = epoch_millis(now - timedelta(days=info.retention_max_days))
    return BuildRetention(
        count=info.retention_max_builds if info.retention_max_builds is not None else -1,
        delete_build_artifacts=info.retention_delete_artifacts,
        build_numbers_not_to_be_discarded=info.retention_builds_not_to_discard,
        minimum_build_date=minimum_build_date,
    )


class BuildInfoBuilder:
    """Collects modules and properties; builds the immutable BuildInfo."""

    def __init__(self, config: RecorderConfig, session: BuildSession) -> None:
        from artiforge import __version__

        info = config.build_info
        self.name = info.build_name or session.top_level_project or "unnamed-build"
        self.number = info.build_number or str(epoch_millis(session.start_time))
        self.started = info.build_started or format_build_started(session.start_time)
        self._agent = Agent(
            name=info.agent_name or DEFAULT_AGENT_NAME,
            version=info.agent_version if info.agent_name else __version__,
        )
        self._build_agent = BuildAgent(
            name=BUILD_AGENT_NAME, version=info.build_agent_version
        )
        self._info = info

        self._modules: list[Module] = []
        self._properties: dict[str, str] = dict(info.properties)
        self._lock = threading.Lock()

        logger.debug("Resolved build.name = %s", self.name)
        logger.debug("Resolved build.number = %s", self.number)
        logger.debug("Resolved build.started = %s", self.started)

    def add_module(self, module: Module) -> None:
        with self._lock:
            self._modules.append(module)

    def add_properties(self, properties: Mapping[str, str]) -> None:
        with self._lock:
            self._properties.update(properties)

    @property
    def modules(self) -> list[Module]:
        with self._lock:
            return list(self._modules)

    def build(self, duration_millis: int) -> BuildInfo:
        info = self._info
        with self._lock:
            modules = list(self._modules)
            properties = dict(self._properties)
        return BuildInfo(
            name=self.name,
            number=self.number,
            started=self.started,
            duration_millis=max(duration_millis, 0),
            agent=self._agent,
            build_agent=self._build_agent,
            principal=info.principal or None,
            artifactory_principal=info.artifactory_principal or None,
            url=info.build_url or None,
            vcs_revision=info.vcs_revision or None,
            parent_name=info.parent_build_name or None,
            parent_number=info.parent_build_number or None,
            modules=modules,
            properties=properties,
        )
