"""Unit tests for artiforge.core.patterns — include/exclude matching."""

from __future__ import annotations

import pytest

from artiforge.core.patterns import (
    IncludeExcludePatterns,
    matches,
    matches_any,
    path_conflicts,
)

JAR = "com/acme/core/1.0/core-1.0.jar"
SOURCES = "com/acme/core/1.0/core-1.0-sources.jar"
POM = "com/acme/core/1.0/core-1.0.pom"


class TestMatches:

    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("*-sources.jar", SOURCES, True),
            ("*-sources.jar", JAR, False),
            ("**/*.pom", POM, True),
            ("**/*.pom", "core-1.0.pom", True),
            ("com/acme/**", JAR, True),
            ("org/**", JAR, False),
            ("com/*/core/1.0/*.jar", JAR, True),
            ("com/*/1.0/*.jar", JAR, False),
            ("core-1.?.jar", JAR, True),
        ],
    )
    def test_ant_style(self, pattern, path, expected):
        assert matches(path, pattern) is expected

    def test_blank_pattern_never_matches(self):
        assert not matches(JAR, "")
        assert not matches(JAR, "   ")

    def test_case_sensitivity(self):
        assert not matches("PATH", "path")
        assert matches("PATH", "path", case_sensitive=False)

    def test_backslashes_normalized(self):
        assert matches("com\\acme\\core.jar", "com/acme/*.jar")

    def test_regex_metacharacters_are_literal(self):
        assert matches("a+b(1).jar", "a+b(1).jar")
        assert not matches("aab1.jar", "a+b(1).jar")

    def test_matches_any(self):
        assert matches_any(POM, ["*.jar", "*.pom"])
        assert not matches_any(POM, [])


class TestPathConflicts:

    def test_no_patterns_means_no_conflict(self):
        assert not path_conflicts(JAR, IncludeExcludePatterns())

    def test_not_included(self):
        patterns = IncludeExcludePatterns(include=["*.pom"])
        assert path_conflicts(JAR, patterns)
        assert not path_conflicts(POM, patterns)

    def test_excluded(self):
        patterns = IncludeExcludePatterns(exclude=["*-sources.jar"])
        assert path_conflicts(SOURCES, patterns)
        assert not path_conflicts(JAR, patterns)

    def test_exclude_wins_over_include(self):
        patterns = IncludeExcludePatterns(include=["**/*.jar"], exclude=["*-sources.jar"])
        assert path_conflicts(SOURCES, patterns)
        assert not path_conflicts(JAR, patterns)

    def test_comma_separated_input(self):
        patterns = IncludeExcludePatterns(exclude="*-sources.jar, *.pom")
        assert patterns.exclude == ("*-sources.jar", "*.pom")
        assert path_conflicts(POM, patterns)
