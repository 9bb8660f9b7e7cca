"""Unit tests for the crawl CLI command.

The pipeline itself is replaced by monkeypatching PipelineDriver.run, so
these tests only cover option handling, output and exit codes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from docspider.cli.app import app
from docspider.crawl.crawler import CrawlStats
from docspider.crawl.models import CrawlResult
from docspider.processing.models import Manifest
from docspider.services.pipeline import PipelineDriver, PipelineError, PipelineResult

runner = CliRunner()

SEEDS = (
    "Getting Started:\n"
    "  - /docs/getting-started\n"
    "  - /docs/security\n"
    "OAuth:\n"
    "  - /docs/oauth\n"
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run each command from a temp directory and drop CLI log handlers after."""
    monkeypatch.chdir(tmp_path)
    yield
    logging.getLogger("docspider").handlers.clear()


def _seeds(tmp_path: Path) -> Path:
    path = tmp_path / "seeds.yaml"
    path.write_text(SEEDS)
    return path


def test_dry_run_lists_seed_pages(tmp_path: Path) -> None:
    """Test dry run prints every seed with its section and the total."""
    result = runner.invoke(app, ["crawl", "--dry-run", "--seeds", str(_seeds(tmp_path))])

    assert result.exit_code == 0
    assert "[Getting Started] /docs/getting-started" in result.output
    assert "[OAuth] /docs/oauth" in result.output
    assert "Total: 3 pages" in result.output


def test_dry_run_missing_catalog_exits_1(tmp_path: Path) -> None:
    """Test dry run fails cleanly when the seed catalog is missing."""
    result = runner.invoke(app, ["crawl", "--dry-run", "--seeds", "missing.yaml"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_crawl_prints_summary(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a successful run prints the crawl summary panel."""
    captured: dict[str, PipelineDriver] = {}

    async def _fake_run(self: PipelineDriver) -> PipelineResult:
        captured["driver"] = self
        manifest = Manifest(
            generated_at="2026-01-01T00:00:00+00:00",
            total_pages=2,
            total_chunks=5,
            total_token_estimate=1234,
            sections=("OAuth",),
            chunks=(),
        )
        return PipelineResult(
            manifest=manifest,
            manifest_path=tmp_path / "out" / "manifest.json",
            chunks_generated=6,
            chunks_filtered=1,
            crawl_stats=CrawlStats(claimed=2, succeeded=2),
        )

    monkeypatch.setattr("docspider.cli.commands.crawl.PipelineDriver.run", _fake_run)

    result = runner.invoke(
        app,
        [
            "crawl",
            "--seeds", str(_seeds(tmp_path)),
            "--output", "out",
            "--concurrency", "3",
            "--renderer", "none",
        ],
    )

    assert result.exit_code == 0
    assert "Crawl Summary" in result.output
    assert "Pages crawled: 2" in result.output
    assert "Chunks: 5 (1 filtered)" in result.output
    assert "Est. tokens: 1,234" in result.output
    settings = captured["driver"].settings
    assert settings.output_dir == Path("out")
    assert settings.concurrency == 3
    assert settings.renderer == "none"


def test_crawl_pipeline_error_exits_1(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that a fatal pipeline error becomes exit code 1."""

    async def _fake_run(self: PipelineDriver) -> PipelineResult:
        raise PipelineError("No pages crawled. Exiting.")

    monkeypatch.setattr("docspider.cli.commands.crawl.PipelineDriver.run", _fake_run)

    result = runner.invoke(app, ["crawl", "--seeds", str(_seeds(tmp_path))])

    assert result.exit_code == 1
    assert "No pages crawled" in result.output


def test_crawl_invalid_option_exits_1() -> None:
    """Test that settings validation errors become exit code 1."""
    result = runner.invoke(app, ["crawl", "--dry-run", "--renderer", "selenium"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_crawl_help() -> None:
    """Test crawl command shows help text."""
    result = runner.invoke(app, ["crawl", "--help"])

    assert result.exit_code == 0
    assert "--dry-run" in result.output


def test_crawl_reports_progress_per_page(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that the driver gets a progress callback that accepts crawled pages."""

    async def _fake_run(self: PipelineDriver) -> PipelineResult:
        assert self.progress_callback is not None
        page = CrawlResult(
            url="https://dev.clever.com/docs/[oauth]",
            path="/docs/[oauth]",
            section="OAuth",
            title="OAuth",
            description="",
            markdown="# OAuth",
        )
        await self.progress_callback(page, 1)
        raise PipelineError("stop after progress")

    monkeypatch.setattr("docspider.cli.commands.crawl.PipelineDriver.run", _fake_run)

    result = runner.invoke(app, ["crawl", "--seeds", str(_seeds(tmp_path))])

    assert result.exit_code == 1
    assert "stop after progress" in result.output
