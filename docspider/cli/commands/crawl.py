"""Crawl command: full pipeline run or dry-run seed listing."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from docspider.core.catalog import SeedCatalog, SeedCatalogError
from docspider.core.config import Settings
from docspider.core.logger import get_logger
from docspider.crawl.models import CrawlResult
from docspider.services.pipeline import PipelineDriver, PipelineError, PipelineResult

console = Console()


def crawl_command(
    dry_run: bool = typer.Option(
        False, "--dry-run", help="List seed pages without fetching anything"
    ),
    seeds: Path | None = typer.Option(None, "-s", "--seeds", help="Seed catalog YAML"),
    output: Path | None = typer.Option(None, "-o", "--output", help="Output directory"),
    concurrency: int | None = typer.Option(
        None, "-c", "--concurrency", help="Number of concurrent workers"
    ),
    renderer: str | None = typer.Option(
        None, "-r", "--renderer", help="Renderer for thin pages: playwright, crawl4ai, none"
    ),
) -> None:
    """Crawl the documentation site, chunk every page and write the manifest.

    Args:
        dry_run: Only enumerate the seed catalog.
        seeds: Seed catalog override.
        output: Output directory override.
        concurrency: Worker count override.
        renderer: Renderer backend override.
    """
    overrides: dict[str, Any] = {
        "seed_file": seeds,
        "output_dir": output,
        "concurrency": concurrency,
        "renderer": renderer,
    }
    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    if dry_run:
        _dry_run(settings.seed_file)
        return

    get_logger("docspider", log_level=settings.log_level, log_file=settings.log_file)
    try:
        result = asyncio.run(_run_pipeline(settings))
    except (PipelineError, SeedCatalogError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    _print_summary(result, settings)


async def _run_pipeline(settings: Settings) -> PipelineResult:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Crawling...", total=None)

        async def update_progress(page: CrawlResult, total_done: int) -> None:
            """Update the spinner with the latest crawled page."""
            progress.update(
                task,
                description=f"[green]{total_done} crawled[/green] | "
                f"{escape(page.path[:60])}",
            )

        driver = PipelineDriver(settings, progress_callback=update_progress)
        return await driver.run()


def _dry_run(seed_file: Path) -> None:
    try:
        catalog = SeedCatalog.load(seed_file)
    except SeedCatalogError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    console.print("Dry run: listing seed URLs only.")
    for task in catalog.tasks():
        console.print(f"[{task.section}] {task.path}", markup=False)
    console.print(f"Total: {len(catalog)} pages")


def _print_summary(result: PipelineResult, settings: Settings) -> None:
    manifest = result.manifest
    panel = Panel(
        f"Pages crawled: {manifest.total_pages}\n"
        f"Chunks: {manifest.total_chunks} "
        f"({result.chunks_filtered} filtered)\n"
        f"Est. tokens: {manifest.total_token_estimate:,}\n"
        f"Sections: {', '.join(manifest.sections)}\n"
        f"Manifest: {result.manifest_path}\n"
        f"Chunks dir: {settings.chunks_dir}\n"
        f"Failed pages: {settings.failed_pages_log}",
        title="Crawl Summary",
    )
    console.print(panel)
