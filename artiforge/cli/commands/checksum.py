"""``artiforge checksum FILE...`` — print MD5 and SHA-1 digests."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from artiforge.core.hasher import ChecksumError, calculate_checksums, is_file

console = Console()

_LABELS = {"md5": "MD5", "sha1": "SHA-1"}


def checksum_cmd(
    files: list[Path] = typer.Argument(
        ...,
        help="Files to checksum.",
    ),
) -> None:
    """Print the checksums an upload of each file would carry."""
    failed = False
    for path in files:
        if not is_file(path):
            console.print(f"[bold red]Not a file:[/bold red] {path}")
            failed = True
            continue
        try:
            checksums = calculate_checksums(path)
        except ChecksumError as exc:
            console.print(f"[bold red]Checksum failed:[/bold red] {exc}")
            failed = True
            continue

        table = Table(title=str(path), show_header=True, header_style="bold cyan")
        table.add_column("Algorithm")
        table.add_column("Digest", style="green", no_wrap=True)
        for name, digest in checksums.items():
            table.add_row(_LABELS.get(name, name), digest)
        console.print(table)

    if failed:
        raise typer.Exit(code=1)
