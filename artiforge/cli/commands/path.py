"""``artiforge path GROUP ARTIFACT VERSION`` — where an artifact would deploy."""

from __future__ import annotations

import typer
from rich.console import Console

from artiforge.core.layout import deployment_path, is_snapshot_path

console = Console()


def path_cmd(
    group_id: str = typer.Argument(..., help="Maven group id."),
    artifact_id: str = typer.Argument(..., help="Maven artifact id."),
    version: str = typer.Argument(..., help="Artifact version."),
    classifier: str = typer.Option("", "--classifier", "-c", help="Classifier."),
    extension: str = typer.Option("jar", "--extension", "-e", help="File extension."),
    release_repo: str = typer.Option(
        "libs-release-local", "--release-repo", help="Release repository key."
    ),
    snapshot_repo: str = typer.Option(
        "", "--snapshot-repo", help="Snapshot repository key (blank: use release)."
    ),
) -> None:
    """Print the repository-relative path and the target repository."""
    path = deployment_path(group_id, artifact_id, version, classifier, extension)
    repository = (
        snapshot_repo if snapshot_repo and is_snapshot_path(path) else release_repo
    )
    console.print(f"[bold]Repository:[/bold] [cyan]{repository}[/cyan]")
    console.print(f"[bold]Path:[/bold]       {path}")
