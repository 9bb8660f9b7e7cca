"""Heading-aware chunking of crawled pages."""

from docspider.processing.chunker import (
    HeadingChunker,
    build_heading_hierarchy,
    merge_small_sections,
    split_by_headings,
    split_large_section,
)
from docspider.processing.models import DocChunk, Manifest, Section

__all__ = [
    "build_heading_hierarchy",
    "DocChunk",
    "HeadingChunker",
    "Manifest",
    "merge_small_sections",
    "Section",
    "split_by_headings",
    "split_large_section",
]
