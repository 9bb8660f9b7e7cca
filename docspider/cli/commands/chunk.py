"""Chunk command: run the chunker over a local markdown file."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docspider.core.config import Settings
from docspider.crawl.models import CrawlResult
from docspider.processing.chunker import HeadingChunker

console = Console()


def chunk_command(
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Markdown file to chunk"
    ),
    title: str | None = typer.Option(
        None, "-t", "--title", help="Page title (defaults to the file name)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print full chunk records as JSON"),
) -> None:
    """Chunk a markdown file offline using the configured size bounds."""
    try:
        settings = Settings()
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc
    chunker = HeadingChunker(
        max_tokens=settings.max_chunk_tokens,
        min_tokens=settings.min_chunk_tokens,
    )
    page = CrawlResult(
        url=file.resolve().as_uri(),
        path=f"/{file.stem}",
        section="Local",
        title=title or file.stem,
        description="",
        markdown=file.read_text(encoding="utf-8"),
    )
    chunks = chunker.chunk_page(page)

    if as_json:
        typer.echo(json.dumps([chunk.to_dict() for chunk in chunks], indent=2))
        return

    if not chunks:
        console.print("No chunks produced")
        return

    table = Table(title=f"{len(chunks)} chunks from {file.name}")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Heading")
    table.add_column("Tokens", justify="right")
    table.add_column("Breadcrumb")
    for chunk in chunks:
        table.add_row(
            str(chunk.chunk_index),
            chunk.id,
            chunk.heading,
            str(chunk.token_estimate),
            " > ".join(chunk.parent_headings),
        )
    console.print(table)
