"""Main Typer application — imports and registers all CLI commands.

Entry point: ``artiforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from artiforge.cli.commands.checksum import checksum_cmd
from artiforge.cli.commands.path import path_cmd
from artiforge.cli.commands.replay import replay_cmd
from artiforge.cli.commands.show import show_cmd
from artiforge.config import ProdConfig

app = typer.Typer(
    name="artiforge",
    help="Artiforge: build-info recording and parallel artifact deployment.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def configure(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to ARTIFORGE_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Install a Rich log handler at the configured level."""
    level = (log_level or ProdConfig().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="checksum", help="Print MD5 and SHA-1 checksums of files.")(checksum_cmd)
app.command(name="path", help="Print the deployment path of a Maven coordinate.")(path_cmd)
app.command(name="replay", help="Replay a recorded build session and deploy it.")(replay_cmd)
app.command(name="show", help="Show a build-info summary.")(show_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
