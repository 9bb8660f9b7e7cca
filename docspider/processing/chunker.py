"""Markdown page chunking with heading-based splitting.

This module provides the HeadingChunker class for splitting a crawled page's
markdown into size-bounded chunks annotated with their heading breadcrumb.

Chunking runs in three order-preserving phases:

1. Split: cut the markdown at heading lines (# through ######). Content
   before the first heading becomes a level-0 section with an empty heading.
2. Merge small: a section below min_tokens is appended to the previous
   section when the combined size stays under max_tokens.
3. Split large: a section above max_tokens is re-packed greedily by
   paragraphs. A single paragraph larger than max_tokens is kept whole.

Examples:
    Basic usage with defaults (min 100, max 1500 tokens):

        chunker = HeadingChunker()
        chunks = chunker.chunk_page(crawl_result)

    Custom bounds:

        chunker = HeadingChunker(max_tokens=800, min_tokens=50)
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from itertools import accumulate

from docspider.core.tokens import estimate_tokens, slugify
from docspider.crawl.models import CrawlResult
from docspider.processing.models import DocChunk, Section

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
PARAGRAPH_BREAK = re.compile(r"\n\n+")
SECTION_SEPARATOR = "\n\n"

# Immutable heading stack: (heading, level) pairs from root to nearest
HeadingStack = tuple[tuple[str, int], ...]


def split_by_headings(markdown: str) -> list[Section]:
    """Split markdown into sections at heading boundaries.

    Heading markers inside fenced code blocks (e.g. shell comments) are not
    treated as headings. Each section keeps its heading line as the first
    line of its content. Whitespace-only sections are dropped.

    Args:
        markdown: Page markdown

    Returns:
        Sections in document order

    Examples:
        >>> [s.heading for s in split_by_headings("intro\\n# A\\ntext\\n## B\\nmore")]
        ['', 'A', 'B']
    """
    sections: list[Section] = []
    heading = ""
    level = 0
    lines: list[str] = []
    in_fence = False

    def flush() -> None:
        content = "\n".join(lines).strip()
        if content:
            sections.append(Section(heading=heading, heading_level=level, content=content))

    for line in markdown.split("\n"):
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
            lines.append(line)
            continue

        match = None if in_fence else HEADING_PATTERN.match(line)
        if match:
            flush()
            heading = match.group(2).strip()
            level = len(match.group(1))
            lines = [line]
        else:
            lines.append(line)

    flush()
    return sections


def merge_small_sections(
    sections: Iterable[Section], min_tokens: int, max_tokens: int
) -> list[Section]:
    """Merge small sections into the preceding section.

    A section below min_tokens is absorbed by the previous output section
    only if the merged content stays under max_tokens; otherwise it stands
    alone. The merged section keeps the earlier section's heading and level.

    Args:
        sections: Sections in document order
        min_tokens: Sections below this size are merge candidates
        max_tokens: Merged content must stay strictly below this size

    Returns:
        Merged sections in document order
    """
    merged: list[Section] = []
    for section in sections:
        if merged and estimate_tokens(section.content) < min_tokens:
            previous = merged[-1]
            combined = previous.content + SECTION_SEPARATOR + section.content
            if estimate_tokens(combined) < max_tokens:
                merged[-1] = Section(
                    heading=previous.heading,
                    heading_level=previous.heading_level,
                    content=combined,
                )
                continue
        merged.append(section)
    return merged


def split_large_section(section: Section, max_tokens: int) -> list[Section]:
    """Split a section that exceeds max_tokens at paragraph boundaries.

    Paragraphs (blank-line separated blocks) are packed greedily: a piece is
    closed as soon as adding the next paragraph would push it over
    max_tokens. Every piece inherits the section's heading and level.

    Args:
        section: Section to split
        max_tokens: Upper size bound for each piece

    Returns:
        [section] unchanged when it fits, otherwise the pieces in order. A
        single paragraph larger than max_tokens becomes its own piece.
    """
    if estimate_tokens(section.content) <= max_tokens:
        return [section]

    pieces: list[Section] = []
    current: list[str] = []

    def close_piece() -> None:
        pieces.append(
            Section(
                heading=section.heading,
                heading_level=section.heading_level,
                content=SECTION_SEPARATOR.join(current),
            )
        )

    for paragraph in PARAGRAPH_BREAK.split(section.content):
        candidate = SECTION_SEPARATOR.join([*current, paragraph])
        if current and estimate_tokens(candidate) > max_tokens:
            close_piece()
            current = []
        current.append(paragraph)

    if current:
        close_piece()
    return pieces


def _push_heading(stack: HeadingStack, section: Section) -> HeadingStack:
    """One fold step: drop siblings/descendants, then push the section heading."""
    kept = tuple(entry for entry in stack if entry[1] < section.heading_level)
    if section.heading:
        return (*kept, (section.heading, section.heading_level))
    return kept


def build_heading_hierarchy(
    sections: Iterable[Section], page_title: str
) -> list[tuple[str, ...]]:
    """Build the breadcrumb for every section.

    Folds over the sections with an immutable heading stack. Before each
    section, entries at the same or a deeper level are removed; a non-empty
    heading is then pushed. The breadcrumb is the page title followed by the
    stack headings from root to nearest.

    Examples:
        >>> sections = [Section("A", 1, "# A"), Section("B", 2, "## B")]
        >>> build_heading_hierarchy(sections, "T")
        [('T', 'A'), ('T', 'A', 'B')]
    """
    stacks = accumulate(sections, _push_heading, initial=())
    next(stacks)  # skip the empty initial stack
    return [(page_title, *(heading for heading, _ in stack)) for stack in stacks]


class HeadingChunker:
    """Chunks crawled pages by headings within min/max size bounds.

    Attributes:
        max_tokens: Upper chunk size bound (default 1500)
        min_tokens: Sections below this are merged into a neighbour (default 100)

    Examples:
        >>> chunker = HeadingChunker()
        >>> chunks = chunker.chunk_page(page)
        >>> chunks[0].id
        'getting-started-00'

    Notes:
        - Token estimation uses 1 token ≈ 4 characters
        - Chunk ids are stable across runs while the title and section order
          are unchanged
    """

    def __init__(self, max_tokens: int = 1500, min_tokens: int = 100) -> None:
        """Initialize the chunker.

        Raises:
            ValueError: If max_tokens <= 0 or min_tokens is not in [0, max_tokens)
        """
        if max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if not 0 <= min_tokens < max_tokens:
            raise ValueError("min_tokens must be between 0 and max_tokens")

        self.max_tokens = max_tokens
        self.min_tokens = min_tokens

    def sections(self, markdown: str) -> list[Section]:
        """Run split -> merge small -> split large over markdown."""
        sections = split_by_headings(markdown)
        sections = merge_small_sections(sections, self.min_tokens, self.max_tokens)
        return [
            piece
            for section in sections
            for piece in split_large_section(section, self.max_tokens)
        ]

    def chunk_page(self, page: CrawlResult, slug: str | None = None) -> list[DocChunk]:
        """Chunk one crawled page.

        Args:
            page: Crawled page
            slug: Id prefix override; defaults to the slug of the page title
                (or its last path segment)

        Returns:
            Chunks in document order, empty for a page without content
        """
        if not page.markdown.strip():
            return []

        if slug is None:
            slug = page_slug(page)

        sections = self.sections(page.markdown)
        hierarchies = build_heading_hierarchy(sections, page.title)
        total_chunks = len(sections)

        return [
            DocChunk(
                id=f"{slug}-{index:02d}",
                url=page.url,
                path=page.path,
                section=page.section,
                title=page.title,
                heading=section.heading or page.title,
                heading_level=section.heading_level,
                parent_headings=breadcrumb,
                content=section.content,
                token_estimate=estimate_tokens(section.content),
                crawled_at=page.crawled_at,
                chunk_index=index,
                total_chunks=total_chunks,
            )
            for index, (section, breadcrumb) in enumerate(zip(sections, hierarchies))
        ]


def page_slug(page: CrawlResult) -> str:
    """Default chunk id prefix for a page."""
    source = page.title or page.path.rstrip("/").split("/")[-1]
    return slugify(source) or "unknown"
