"""Concurrent frontier crawler.

Runs a fixed pool of asyncio workers over a shared Frontier. Each worker
claims a task, waits the per-worker request delay, fetches the page, and
offers every newly discovered documentation path back to the frontier. The
crawl finishes when the frontier is empty and no fetch is in flight.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from docspider.crawl.frontier import Frontier
from docspider.crawl.models import (
    DISCOVERED_SECTION,
    CrawlResult,
    FetchMethod,
    PageTask,
)
from docspider.resilience.failed_pages import FailedPageLogger

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """Anything that can fetch one page for the crawler."""

    async def fetch(self, path: str, section: str) -> CrawlResult | None: ...


@dataclass
class CrawlStats:
    """Counters for one crawl run."""

    claimed: int = 0
    succeeded: int = 0
    failed: int = 0
    rendered: int = 0
    discovered: int = 0


class FrontierCrawler:
    """Crawl a documentation site from a list of seed tasks.

    Args:
        fetcher: Page fetcher invoked once per unique path
        concurrency: Number of concurrent workers
        request_delay: Seconds each worker waits before every fetch
        failures: Optional JSONL recorder for pages that raise unexpectedly
        progress_callback: Optional async callback(result, total_done) called
            after each successful fetch. Errors it raises are logged and the
            crawl continues.

    Example:
        >>> crawler = FrontierCrawler(fetcher, concurrency=5, request_delay=0.3)
        >>> results = await crawler.crawl(catalog.tasks())
        >>> crawler.stats.succeeded
        87
    """

    def __init__(
        self,
        fetcher: Fetcher,
        concurrency: int = 5,
        request_delay: float = 0.3,
        failures: FailedPageLogger | None = None,
        progress_callback: Callable[[CrawlResult, int], Awaitable[None]] | None = None,
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be positive")
        self.fetcher = fetcher
        self.concurrency = concurrency
        self.request_delay = request_delay
        self.failures = failures
        self.progress_callback = progress_callback
        self.stats = CrawlStats()
        self.frontier: Frontier | None = None

    async def crawl(self, seeds: Sequence[PageTask]) -> list[CrawlResult]:
        """Crawl every page reachable from seeds.

        Args:
            seeds: Initial tasks; duplicates by path are fetched once, tagged
                with the section of the first occurrence

        Returns:
            One CrawlResult per successfully fetched path, in completion order
        """
        self.stats = CrawlStats()
        self.frontier = Frontier(seeds)
        results: list[CrawlResult] = []

        logger.info(
            f"Starting crawl of {len(seeds)} seed pages with "
            f"{self.concurrency} workers"
        )
        workers = [
            asyncio.create_task(self._worker(self.frontier, results))
            for _ in range(self.concurrency)
        ]
        await asyncio.gather(*workers)

        logger.info(
            f"Crawl completed: {self.stats.succeeded} succeeded, "
            f"{self.stats.failed} failed, {self.stats.rendered} rendered, "
            f"{self.stats.discovered} discovered out of "
            f"{self.stats.claimed} unique pages"
        )
        return results

    async def _worker(self, frontier: Frontier, results: list[CrawlResult]) -> None:
        while (task := await frontier.claim()) is not None:
            try:
                await self._process(task, frontier, results)
            finally:
                await frontier.task_done()

    async def _process(
        self, task: PageTask, frontier: Frontier, results: list[CrawlResult]
    ) -> None:
        self.stats.claimed += 1
        if self.request_delay > 0:
            await asyncio.sleep(self.request_delay)

        logger.info(f"Crawling: {task.path}")
        try:
            result = await self.fetcher.fetch(task.path, task.section)
        except Exception as exc:  # noqa: BLE001
            # Per-page failures are dropped, never propagated
            logger.error(f"Unexpected error crawling {task.path}: {exc}")
            if self.failures is not None:
                self.failures.log_failure(task.path, "", task.section, "crawl", exc)
            self.stats.failed += 1
            return

        if result is None:
            self.stats.failed += 1
            return

        results.append(result)
        self.stats.succeeded += 1
        if result.fetch_method is FetchMethod.RENDERED:
            self.stats.rendered += 1

        for path in result.discovered_paths:
            if await frontier.offer(path, DISCOVERED_SECTION):
                self.stats.discovered += 1

        if self.progress_callback is not None:
            try:
                await self.progress_callback(result, len(results))
            except Exception as exc:  # noqa: BLE001
                # Reporting never aborts the crawl
                logger.warning(f"Progress callback failed for {task.path}: {exc}")
