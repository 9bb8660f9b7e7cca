"""Seeds command: summarize the seed catalog."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docspider.core.catalog import SeedCatalog, SeedCatalogError
from docspider.core.config import Settings

console = Console()


def seeds_command(
    seeds: Path | None = typer.Option(None, "-s", "--seeds", help="Seed catalog YAML"),
) -> None:
    """List catalog sections with their page counts."""
    seed_file = seeds
    if seed_file is None:
        try:
            seed_file = Settings().seed_file
        except ValidationError as exc:
            console.print(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
            raise typer.Exit(code=1) from exc
    try:
        catalog = SeedCatalog.load(seed_file)
    except SeedCatalogError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    table = Table(title=f"Seed catalog: {seed_file}")
    table.add_column("Section")
    table.add_column("Pages", justify="right")
    for section, paths in catalog.entries.items():
        table.add_row(section, str(len(paths)))
    console.print(table)
    console.print(f"Total: {len(catalog)} pages in {len(catalog.sections)} sections")
