"""Pipeline driver: crawl → chunk → filter → manifest → persist.

Every run rebuilds the knowledge base from scratch. Per-page and per-chunk
problems only reduce the output counts; a run aborts (PipelineError) only
when there is nothing to crawl or nothing was crawled.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from docspider.core.catalog import SeedCatalog
from docspider.core.config import Settings
from docspider.core.tokens import slugify
from docspider.crawl.crawler import CrawlStats, FrontierCrawler
from docspider.crawl.extractor import PageExtractor
from docspider.crawl.fetcher import PageFetcher
from docspider.crawl.models import CrawlResult
from docspider.crawl.renderer import create_renderer
from docspider.processing.chunker import HeadingChunker, page_slug
from docspider.processing.models import DocChunk, Manifest
from docspider.resilience.failed_pages import FailedPageLogger
from docspider.storage.writer import OutputWriter

logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
    """Raised when a run cannot produce any output (fatal setup failure)."""


@dataclass(frozen=True)
class PipelineResult:
    """Outcome of a full pipeline run.

    Args:
        manifest: Manifest that was written
        manifest_path: Location of manifest.json
        chunks_generated: Chunks produced before filtering
        chunks_filtered: Degenerate chunks dropped
        crawl_stats: Counters from the crawl phase
    """

    manifest: Manifest
    manifest_path: Path
    chunks_generated: int
    chunks_filtered: int
    crawl_stats: CrawlStats


def assign_page_slugs(pages: Sequence[CrawlResult]) -> dict[str, str]:
    """Pick a run-unique chunk id prefix for every page path.

    Pages keep their title slug unless another page already claimed it, in
    which case the slug of the path is used, then a numeric suffix.

    Returns:
        Mapping of page path -> slug
    """
    slugs: dict[str, str] = {}
    taken: set[str] = set()
    for page in pages:
        slug = page_slug(page)
        if slug in taken:
            slug = slugify(page.path) or slug
        base, counter = slug, 2
        while slug in taken:
            slug = f"{base}-{counter}"
            counter += 1
        taken.add(slug)
        slugs[page.path] = slug
    return slugs


def chunk_pages(pages: Sequence[CrawlResult], chunker: HeadingChunker) -> list[DocChunk]:
    """Chunk every page, keeping page order and per-page chunk order."""
    slugs = assign_page_slugs(pages)
    return [
        chunk
        for page in pages
        for chunk in chunker.chunk_page(page, slug=slugs[page.path])
    ]


def filter_chunks(chunks: Iterable[DocChunk], min_useful_tokens: int) -> list[DocChunk]:
    """Drop degenerate chunks below min_useful_tokens."""
    return [chunk for chunk in chunks if chunk.token_estimate >= min_useful_tokens]


def build_manifest(
    pages: Sequence[CrawlResult],
    chunks: Sequence[DocChunk],
    generated_at: str | None = None,
) -> Manifest:
    """Assemble the manifest with aggregate counts.

    Args:
        pages: Crawled pages (counted, and their sections listed)
        chunks: Chunks kept after filtering
        generated_at: ISO8601 timestamp, defaults to now (UTC)
    """
    return Manifest(
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
        total_pages=len(pages),
        total_chunks=len(chunks),
        total_token_estimate=sum(chunk.token_estimate for chunk in chunks),
        sections=tuple(sorted({page.section for page in pages})),
        chunks=tuple(chunks),
    )


class PipelineDriver:
    """Runs the full ingestion pipeline for one seed catalog.

    Collaborators are built from settings unless injected, which lets tests
    swap in a fake crawler or writer.

    Args:
        settings: Pipeline configuration
        catalog: Seed catalog (defaults to SeedCatalog.load(settings.seed_file))
        crawler: Crawler to use instead of building one from settings
        chunker: Chunker (defaults to settings' chunk bounds)
        writer: Output writer (defaults to settings.output_dir)
        failures: Failed-page recorder (defaults to settings.failed_pages_log)
        progress_callback: Async callback(result, total_done) forwarded to the
            crawler built from settings

    Example:
        >>> driver = PipelineDriver(Settings())
        >>> result = await driver.run()
        >>> result.manifest.total_chunks
        412
    """

    def __init__(
        self,
        settings: Settings,
        catalog: SeedCatalog | None = None,
        crawler: FrontierCrawler | None = None,
        chunker: HeadingChunker | None = None,
        writer: OutputWriter | None = None,
        failures: FailedPageLogger | None = None,
        progress_callback: Callable[[CrawlResult, int], Awaitable[None]] | None = None,
    ) -> None:
        self.settings = settings
        self.catalog = catalog
        self.crawler = crawler
        self.chunker = chunker or HeadingChunker(
            max_tokens=settings.max_chunk_tokens,
            min_tokens=settings.min_chunk_tokens,
        )
        self.writer = writer or OutputWriter(settings.output_dir)
        self.failures = failures or FailedPageLogger(settings.failed_pages_log)
        self.progress_callback = progress_callback

    async def run(self) -> PipelineResult:
        """Crawl, chunk, filter and persist.

        Raises:
            PipelineError: If the seed catalog is empty or no page was crawled
            SeedCatalogError: If the seed catalog cannot be loaded
        """
        catalog = self.catalog
        if catalog is None:
            catalog = SeedCatalog.load(self.settings.seed_file)
        seeds = catalog.tasks()
        if not seeds:
            raise PipelineError("Seed catalog is empty. Nothing to crawl.")

        logger.info(
            f"Seed URLs: {len(seeds)} pages across {len(catalog.sections)} sections"
        )
        self.failures.reset()

        logger.info("Phase 1: Crawling pages...")
        pages, crawl_stats = await self._crawl(seeds)
        logger.info(f"Crawled {len(pages)} pages successfully.")
        if not pages:
            raise PipelineError("No pages crawled. Exiting.")

        logger.info("Phase 2: Chunking content...")
        all_chunks = chunk_pages(pages, self.chunker)
        chunks = filter_chunks(all_chunks, self.settings.min_useful_tokens)
        filtered = len(all_chunks) - len(chunks)
        logger.info(
            f"Generated {len(all_chunks)} chunks, kept {len(chunks)} "
            f"(filtered {filtered} tiny chunks)."
        )

        logger.info("Phase 3: Writing output...")
        manifest = build_manifest(pages, chunks)
        manifest_path = self.writer.write(chunks, manifest)

        return PipelineResult(
            manifest=manifest,
            manifest_path=manifest_path,
            chunks_generated=len(all_chunks),
            chunks_filtered=filtered,
            crawl_stats=crawl_stats,
        )

    async def _crawl(self, seeds) -> tuple[list[CrawlResult], CrawlStats]:
        if self.crawler is not None:
            pages = await self.crawler.crawl(seeds)
            return pages, self.crawler.stats

        settings = self.settings
        renderer = create_renderer(settings)
        fetcher = PageFetcher(
            base_url=settings.base_url,
            extractor=PageExtractor(settings.base_url, settings.link_prefix),
            renderer=renderer,
            thin_page_tokens=settings.thin_page_tokens,
            timeout=settings.request_timeout,
            user_agent=settings.user_agent,
            failures=self.failures,
        )
        crawler = FrontierCrawler(
            fetcher,
            concurrency=settings.concurrency,
            request_delay=settings.request_delay,
            failures=self.failures,
            progress_callback=self.progress_callback,
        )
        try:
            pages = await crawler.crawl(seeds)
        finally:
            await fetcher.close()
            if renderer is not None:
                await renderer.close()
        return pages, crawler.stats
