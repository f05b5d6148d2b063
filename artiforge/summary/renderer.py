"""Rich terminal renderer for build-info summaries.

Color scheme
------------
- green  : deployed / published artifacts
- yellow : artifacts excluded by include/exclude patterns
- dim    : modules with nothing to deploy
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from artiforge.models.artifacts import DeployDetails
from artiforge.models.buildinfo import BuildInfo


class BuildInfoRenderer:
    """Renders a ``BuildInfo`` (and optionally what was deployed) with Rich.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(
        self, build_info: BuildInfo, deployed: list[DeployDetails] | None = None
    ) -> Panel:
        """Render *build_info* as a Panel with module and deployment tables."""
        parts: list[object] = [self._module_table(build_info)]
        if deployed:
            parts.extend([Text(""), self._deployed_table(deployed)])

        artifact_count = sum(len(m.artifacts) for m in build_info.modules)
        excluded_count = sum(len(m.excluded_artifacts) for m in build_info.modules)
        summary = "  |  ".join(
            [
                f"[bold]Build:[/bold] {escape(build_info.name)}/{escape(build_info.number)}",
                f"[bold]Modules:[/bold] {len(build_info.modules)}",
                f"[bold]Artifacts:[/bold] {artifact_count}",
                f"[bold]Excluded:[/bold] {excluded_count}",
                f"[bold]Duration:[/bold] {build_info.duration_millis} ms",
            ]
        )
        parts.extend([Text(""), Text.from_markup(summary)])

        return Panel(
            Group(*parts),
            title="[bold]Build Info[/bold]",
            subtitle=f"Started: {build_info.started}",
            border_style="blue",
            padding=(1, 2),
        )

    def _module_table(self, build_info: BuildInfo) -> Table:
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Module", min_width=20)
        table.add_column("Artifacts")
        table.add_column("Excluded")
        table.add_column("Dependencies", justify="right", width=12)

        for module in build_info.modules:
            artifacts = "\n".join(escape(a.name) for a in module.artifacts) or "[dim]-[/dim]"
            excluded = (
                "\n".join(f"[yellow]{escape(a.name)}[/yellow]" for a in module.excluded_artifacts)
                or "[dim]-[/dim]"
            )
            style = "" if module.artifacts else "dim"
            table.add_row(
                Text(module.id, style=style),
                artifacts,
                excluded,
                str(len(module.dependencies)),
            )
        return table

    def _deployed_table(self, deployed: list[DeployDetails]) -> Table:
        table = Table(
            title="Deployed", show_header=True, header_style="bold green", expand=True
        )
        table.add_column("Repository", style="green")
        table.add_column("Path")
        table.add_column("SHA-1", style="dim")
        for details in deployed:
            table.add_row(
                details.target_repository,
                details.artifact_path,
                (details.sha1 or "")[:12],
            )
        return table

    def print_build_info(
        self, build_info: BuildInfo, deployed: list[DeployDetails] | None = None
    ) -> None:
        self.console.print(self.render(build_info, deployed))
