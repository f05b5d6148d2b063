"""``artiforge show BUILD_INFO_JSON`` — render a build-info summary."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from artiforge.models.buildinfo import BuildInfo
from artiforge.summary.renderer import BuildInfoRenderer

console = Console()


def show_cmd(
    build_info_file: Path = typer.Argument(
        ...,
        help="Path to a build-info JSON file.",
    ),
) -> None:
    """Render a build-info record as a module table."""
    if not build_info_file.is_file():
        console.print(f"[bold red]Build info not found:[/bold red] {build_info_file}")
        raise typer.Exit(code=1)

    try:
        build_info = BuildInfo.model_validate_json(
            build_info_file.read_text(encoding="utf-8")
        )
    except ValidationError as exc:
        console.print(f"[bold red]Invalid build info:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    BuildInfoRenderer(console=console).print_build_info(build_info)
