"""Unit tests for artiforge.core.layout — Maven names and paths."""

from __future__ import annotations

import pytest

from artiforge.core.layout import (
    artifact_name,
    deployable_key,
    deployment_path,
    file_extension,
    is_snapshot_path,
    module_id,
    type_string,
)


class TestNames:

    def test_module_id(self):
        assert module_id("com.acme", "core", "1.0") == "com.acme:core:1.0"

    def test_deployable_key(self):
        assert deployable_key("com.acme:core:1.0", "core-1.0.jar") == (
            "com.acme:core:1.0:core-1.0.jar"
        )

    def test_artifact_name_without_classifier(self):
        assert artifact_name("core", "1.0", "", "jar") == "core-1.0.jar"
        assert artifact_name("core", "1.0", None, "jar") == "core-1.0.jar"

    def test_artifact_name_with_classifier(self):
        assert artifact_name("core", "1.0", "sources", "jar") == "core-1.0-sources.jar"

    def test_blank_classifier_ignored(self):
        assert artifact_name("core", "1.0", "  ", "jar") == "core-1.0.jar"


class TestDeploymentPath:

    def test_group_dots_become_directories(self):
        assert deployment_path("com.acme.tools", "core", "1.0", "", "jar") == (
            "com/acme/tools/core/1.0/core-1.0.jar"
        )

    def test_classifier_in_file_name(self):
        assert deployment_path("g", "a", "2", "tests", "jar") == "g/a/2/a-2-tests.jar"


class TestTypeString:

    @pytest.mark.parametrize(
        ("type_", "classifier", "extension", "expected"),
        [
            ("jar", "", "jar", "jar"),
            ("jar", "sources", "jar", "sources-jar"),
            ("pom", "", "xml", "pom"),
            ("ivy", "", "xml", "ivy"),
            ("test-jar", "tests", "jar", "jar"),
            ("bundle", "", "", "bundle"),
            ("maven-plugin", "", "jar", "jar"),
        ],
    )
    def test_type_rules(self, type_, classifier, extension, expected):
        assert type_string(type_, classifier, extension) == expected


class TestHelpers:

    def test_file_extension(self):
        assert file_extension("/x/core-1.0.jar") == "jar"
        assert file_extension("/x/archive.tar.gz") == "gz"
        assert file_extension("/x/noext") == ""
        assert file_extension(None) == ""

    def test_is_snapshot_path(self):
        assert is_snapshot_path("g/a/1.0-SNAPSHOT/a-1.0-SNAPSHOT.jar")
        assert not is_snapshot_path("g/a/1.0/a-1.0.jar")
