"""Integration tests — a full build session from first event to deployment.

Drives the recorder the way a multi-threaded orchestrator does: each module
runs on its own worker thread, the session ends on the main thread, and the
deployer uploads through a real LocalRepository or the recording client.
"""

from __future__ import annotations

import json
import threading
from datetime import timedelta

from artiforge.core.deployer import ParallelDeployer
from artiforge.core.recorder import BuildInfoRecorder, RecorderState
from artiforge.models.config import BuildInfoConfig, RecorderConfig
from artiforge.models.events import SessionOutcome


def _run_on_worker(fn, *args) -> None:
    thread = threading.Thread(target=fn, args=args)
    thread.start()
    thread.join()


class TestSuccessfulAndFailedModules:
    """Module A succeeds, module B fails, the session ends cleanly."""

    def test_one_module_one_upload_one_publication(
        self, make_recorder, make_project, make_dependency, make_outcome, client
    ):
        recorder = make_recorder()
        project_a = make_project("a", with_descriptor=False,
                                 dependencies=[make_dependency("lib-a")])
        project_b = make_project("b", dependencies=[make_dependency("lib-b")])

        def run_a() -> None:
            recorder.on_module_started(project_a)
            recorder.on_dependency_observed(project_a)
            recorder.on_module_succeeded(project_a)

        def run_b() -> None:
            recorder.on_module_started(project_b)
            recorder.on_dependency_observed(project_b)
            recorder.on_module_failed(project_b)

        recorder.on_session_started()
        _run_on_worker(run_a)
        _run_on_worker(run_b)
        recorder.on_session_ended(make_outcome())

        info = recorder.build_info
        assert recorder.state is RecorderState.SESSION_COMPLETE
        assert [m.id for m in info.modules] == ["com.acme:a:1.0.0"]
        assert [d.id for d in info.modules[0].dependencies] == ["org.example:lib-a:2.0"]
        assert client.uploaded_paths == ["com/acme/a/1.0.0/a-1.0.0.jar"]
        assert client.published == [info]


class TestSessionWithException:
    """A session that reports an exception deploys and publishes nothing."""

    def test_nothing_is_deployed(self, make_recorder, make_project, make_outcome, client):
        recorder = make_recorder()
        project = make_project("a")
        recorder.on_module_started(project)
        recorder.on_module_succeeded(project)
        recorder.on_session_ended(make_outcome(exceptions=["MojoFailureException"]))

        assert recorder.state is RecorderState.SESSION_ABORTED
        assert recorder.build_info is None
        assert client.uploads == []
        assert client.published == []


class TestLocalRepositoryDeployment:
    """Full session deployed into a filesystem repository."""

    def test_snapshot_and_release_routing(
        self, session, make_project, make_artifact, local_repository, tmp_dir
    ):
        report = tmp_dir / "deployed.json"
        config = RecorderConfig(
            snapshot_repository_key="libs-snapshot-local",
            exclude_patterns=["*-sources.jar"],
            deployable_artifacts_file=report,
            build_info=BuildInfoConfig(build_name="acme", build_number="42"),
        )
        recorder = BuildInfoRecorder(
            session, config, ParallelDeployer(local_repository, config)
        )

        release = make_project("core")
        snapshot = make_project(
            "web",
            version="2.0-SNAPSHOT",
            attached=[make_artifact("web", "2.0-SNAPSHOT", classifier="sources")],
        )
        for project in (release, snapshot):
            recorder.on_module_started(project)
            recorder.on_module_succeeded(project)
        recorder.on_session_ended(
            SessionOutcome(end_time=session.start_time + timedelta(seconds=1))
        )

        assert local_repository.exists(
            "libs-release-local", "com/acme/core/1.0.0/core-1.0.0.jar"
        )
        assert local_repository.exists(
            "libs-snapshot-local", "com/acme/web/2.0-SNAPSHOT/web-2.0-SNAPSHOT.pom"
        )
        assert not local_repository.exists(
            "libs-snapshot-local",
            "com/acme/web/2.0-SNAPSHOT/web-2.0-SNAPSHOT-sources.jar",
        )

        stored = local_repository.load_build_info("acme", "42")
        web = stored.get_module("com.acme:web:2.0-SNAPSHOT")
        assert [a.name for a in web.excluded_artifacts] == ["web-2.0-SNAPSHOT-sources.jar"]
        assert stored.duration_millis == 1000

        assert len(json.loads(report.read_text())) == 4
        props = local_repository.properties(
            "libs-release-local", "com/acme/core/1.0.0/core-1.0.0.jar"
        )
        assert props["build.name"] == "acme"
        assert props["build.number"] == "42"
