"""Include/exclude glob matching for deployment paths.

Patterns use Ant-style wildcards on ``/``-separated paths:

- ``**`` matches any number of path segments (including none)
- ``*`` matches within a single segment
- ``?`` matches one character within a segment

A pattern without ``/`` is also tried against the last path segment, so
``*-sources.jar`` excludes the sources jar wherever it lives.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, field_validator

from artiforge.models.config import split_patterns


class IncludeExcludePatterns(BaseModel):
    """Include and exclude pattern lists. An empty include list includes all."""

    model_config = ConfigDict(frozen=True)

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def accept_comma_separated(cls, value: object) -> object:
        return split_patterns(value)


@lru_cache(maxsize=512)
def _compile(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts), 0 if case_sensitive else re.IGNORECASE)


def _normalize(path: str) -> str:
    return path.replace("\\", "/").lstrip("/")


def matches(path: str, pattern: str, *, case_sensitive: bool = True) -> bool:
    """Return True if *path* matches the glob *pattern*."""
    pattern = _normalize(pattern.strip())
    if not pattern:
        return False
    path = _normalize(path)
    regex = _compile(pattern, case_sensitive)
    if regex.fullmatch(path):
        return True
    if "/" not in pattern:
        return regex.fullmatch(path.rsplit("/", 1)[-1]) is not None
    return False


def matches_any(
    path: str, patterns: Iterable[str], *, case_sensitive: bool = True
) -> bool:
    return any(matches(path, p, case_sensitive=case_sensitive) for p in patterns)


def path_conflicts(path: str, patterns: IncludeExcludePatterns) -> bool:
    """Return True if *path* must NOT be deployed under *patterns*."""
    included = not patterns.include or matches_any(path, patterns.include)
    return not included or matches_any(path, patterns.exclude)
