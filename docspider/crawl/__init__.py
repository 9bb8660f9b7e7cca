"""Crawling components: extraction, rendering, fetching and the frontier crawler."""

from docspider.crawl.crawler import CrawlStats, FrontierCrawler
from docspider.crawl.extractor import PageExtractor, html_to_markdown
from docspider.crawl.fetcher import PageFetcher, choose_content
from docspider.crawl.frontier import Frontier
from docspider.crawl.models import CrawlResult, ExtractedPage, FetchMethod, PageTask
from docspider.crawl.renderer import (
    Crawl4AIRenderer,
    PlaywrightRenderer,
    Renderer,
    RenderError,
    create_renderer,
)

__all__ = [
    "choose_content",
    "Crawl4AIRenderer",
    "CrawlResult",
    "CrawlStats",
    "create_renderer",
    "ExtractedPage",
    "FetchMethod",
    "Frontier",
    "FrontierCrawler",
    "html_to_markdown",
    "PageExtractor",
    "PageFetcher",
    "PageTask",
    "PlaywrightRenderer",
    "Renderer",
    "RenderError",
]
