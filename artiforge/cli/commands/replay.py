"""``artiforge replay SESSION_JSON`` — record and deploy a recorded session.

Feeds a session manifest through a ``BuildInfoRecorder`` exactly as a live
build would, then deploys to a local directory repository (``--target-dir``)
or an HTTP repository (``--url``).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from artiforge.bridge.client import ArtifactRepositoryClient
from artiforge.bridge.http_client import HttpRepositoryClient
from artiforge.config import ProdConfig
from artiforge.core.artifact_store import LocalRepository
from artiforge.core.deployer import DeploymentError, ParallelDeployer
from artiforge.core.recorder import BuildInfoRecorder
from artiforge.core.session_replay import (
    ManifestError,
    load_manifest,
    replay,
    session_for,
)
from artiforge.summary.renderer import BuildInfoRenderer

console = Console()


def replay_cmd(
    session_file: Path = typer.Argument(
        ...,
        help="Path to a recorded session manifest (JSON).",
    ),
    target_dir: Path = typer.Option(
        None,
        "--target-dir",
        "-t",
        help="Deploy into a local directory repository.",
    ),
    url: str = typer.Option(
        None,
        "--url",
        "-u",
        help="Deploy to an HTTP repository (defaults to ARTIFORGE_REPOSITORY_URL).",
    ),
    publish_artifacts: bool = typer.Option(
        True,
        "--publish-artifacts/--no-publish-artifacts",
        help="Upload the recorded artifacts.",
    ),
    publish_build_info: bool = typer.Option(
        True,
        "--publish-build-info/--no-publish-build-info",
        help="Publish the build-info record.",
    ),
    concurrency: int = typer.Option(
        None,
        "--concurrency",
        "-n",
        min=1,
        help="Parallel upload workers (defaults to ARTIFORGE_DEPLOY_CONCURRENCY).",
    ),
) -> None:
    """Replay a recorded build session through the recorder and deploy it."""
    settings = ProdConfig()
    repository_url = url or settings.repository_url
    if target_dir is not None and url:
        console.print("[bold red]Use either --target-dir or --url, not both.[/bold red]")
        raise typer.Exit(code=2)
    if target_dir is None and not repository_url:
        console.print(
            "[bold red]No repository:[/bold red] pass --target-dir or --url "
            "(or set ARTIFORGE_REPOSITORY_URL)."
        )
        raise typer.Exit(code=2)

    try:
        manifest = load_manifest(session_file)
    except ManifestError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)

    overrides: dict[str, object] = {
        "publish_artifacts": publish_artifacts,
        "publish_build_info": publish_build_info,
    }
    if concurrency is not None:
        overrides["deploy_concurrency"] = concurrency
    config = settings.to_recorder_config(**overrides)

    client: ArtifactRepositoryClient
    if target_dir is not None:
        client = LocalRepository(target_dir)
    else:
        client = HttpRepositoryClient(repository_url)

    recorder = BuildInfoRecorder(
        session_for(manifest), config, ParallelDeployer(client, config)
    )
    try:
        replay(manifest, recorder)
    except DeploymentError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1)
    finally:
        client.close()

    if recorder.build_info is None:
        console.print(
            f"[yellow]Session reported {len(manifest.exceptions)} exception(s); "
            "no build info was produced.[/yellow]"
        )
        raise typer.Exit(code=1)

    BuildInfoRenderer(console=console).print_build_info(
        recorder.build_info, recorder.deployed
    )
