"""Shared pytest fixtures for unit tests."""

from pathlib import Path

import pytest

from docspider.core.config import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings writing every artifact under a temp directory."""
    return Settings(
        base_url="https://dev.example.com",
        seed_file=tmp_path / "seeds.yaml",
        output_dir=tmp_path / "docs",
        log_file=tmp_path / "docspider.log",
        failed_pages_log=tmp_path / "failed_pages.jsonl",
        renderer="none",
        request_delay_ms=0,
    )
