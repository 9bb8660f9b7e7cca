"""Data models for chunking and the retrieval manifest."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Section:
    """A slice of page markdown under one heading.

    Args:
        heading: Heading text, empty for content before the first heading
        heading_level: 1-6 for #-######, 0 for content before the first heading
        content: Section markdown, including its heading line
    """

    heading: str
    heading_level: int
    content: str


@dataclass(frozen=True)
class DocChunk:
    """A bounded-size, heading-addressable unit of page content.

    Args:
        id: Unique identifier, ``<title-slug>-<zero-padded index>``
        url: Absolute page URL
        path: Site-relative page path
        section: Catalog section of the page
        title: Page title
        heading: Nearest heading, or the page title for untitled leading content
        heading_level: Heading level 0-6
        parent_headings: Breadcrumb from page title down to the nearest heading
        content: Chunk markdown
        token_estimate: Estimated token count of content
        crawled_at: ISO8601 crawl timestamp of the page
        chunk_index: Dense 0-based position within the page
        total_chunks: Number of chunks produced for the page
    """

    id: str
    url: str
    path: str
    section: str
    title: str
    heading: str
    heading_level: int
    parent_headings: tuple[str, ...]
    content: str
    token_estimate: int
    crawled_at: str
    chunk_index: int
    total_chunks: int

    @property
    def file(self) -> str:
        """Chunk artifact location relative to the output directory."""
        return f"chunks/{self.id}.json"

    def to_dict(self) -> dict[str, Any]:
        """Full chunk artifact record."""
        return {
            "id": self.id,
            "url": self.url,
            "path": self.path,
            "section": self.section,
            "title": self.title,
            "heading": self.heading,
            "headingLevel": self.heading_level,
            "parentHeadings": list(self.parent_headings),
            "content": self.content,
            "tokenEstimate": self.token_estimate,
            "crawledAt": self.crawled_at,
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
        }

    def manifest_entry(self) -> dict[str, Any]:
        """Manifest record for this chunk (content excluded)."""
        return {
            "id": self.id,
            "file": self.file,
            "url": self.url,
            "path": self.path,
            "section": self.section,
            "title": self.title,
            "heading": self.heading,
            "parentHeadings": list(self.parent_headings),
            "tokenEstimate": self.token_estimate,
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
        }


@dataclass(frozen=True)
class Manifest:
    """Index of every chunk produced by a run.

    Args:
        generated_at: ISO8601 generation timestamp
        total_pages: Number of pages crawled
        total_chunks: Number of chunks kept
        total_token_estimate: Sum of kept chunk token estimates
        sections: Distinct page sections, sorted
        chunks: Kept chunks in output order
    """

    generated_at: str
    total_pages: int
    total_chunks: int
    total_token_estimate: int
    sections: tuple[str, ...]
    chunks: tuple[DocChunk, ...]

    def to_dict(self) -> dict[str, Any]:
        """Manifest artifact record."""
        return {
            "generatedAt": self.generated_at,
            "totalPages": self.total_pages,
            "totalChunks": self.total_chunks,
            "totalTokenEstimate": self.total_token_estimate,
            "sections": list(self.sections),
            "chunks": [chunk.manifest_entry() for chunk in self.chunks],
        }
