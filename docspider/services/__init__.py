"""Service layer orchestrating a full crawl-to-manifest run."""

from docspider.services.pipeline import (
    PipelineDriver,
    PipelineError,
    PipelineResult,
    build_manifest,
    chunk_pages,
    filter_chunks,
)

__all__ = [
    "PipelineDriver",
    "PipelineError",
    "PipelineResult",
    "build_manifest",
    "chunk_pages",
    "filter_chunks",
]
