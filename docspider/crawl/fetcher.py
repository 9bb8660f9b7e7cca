"""Page fetcher with render fallback for thin pages.

Fetch layer: direct request → (thin content?) → full render → keep the larger.

Some documentation sites hydrate their content client-side, so a direct
request returns a near-empty shell. When the extracted markdown of a direct
fetch is below a size threshold the page is rendered in a browser and
extracted again; whichever extraction is larger is kept.
"""

from __future__ import annotations

import logging

import httpx

from docspider.core.tokens import estimate_tokens
from docspider.crawl.extractor import PageExtractor
from docspider.crawl.models import CrawlResult, ExtractedPage, FetchMethod
from docspider.crawl.renderer import Renderer, RenderError
from docspider.resilience.failed_pages import FailedPageLogger

logger = logging.getLogger(__name__)


def is_thin(page: ExtractedPage, threshold: int) -> bool:
    """Check whether extracted content is too small to trust."""
    return estimate_tokens(page.markdown) < threshold


def choose_content(
    direct: ExtractedPage, rendered: ExtractedPage | None
) -> tuple[ExtractedPage, FetchMethod]:
    """Pick between a direct and a rendered extraction of the same page.

    The extraction with the larger estimated token count wins; ties and a
    missing render keep the direct result.

    Args:
        direct: Extraction of the directly fetched markup
        rendered: Extraction of the rendered markup, None if rendering failed

    Returns:
        Tuple of (chosen extraction, method that produced it)
    """
    if rendered is not None and estimate_tokens(rendered.markdown) > estimate_tokens(
        direct.markdown
    ):
        return rendered, FetchMethod.RENDERED
    return direct, FetchMethod.DIRECT


class PageFetcher:
    """Fetches and extracts single documentation pages.

    Args:
        base_url: Site root that page paths are appended to
        extractor: Extractor used for both direct and rendered markup
        renderer: Optional rendering backend for thin pages
        thin_page_tokens: Direct results below this estimate are rendered
        timeout: Direct request timeout in seconds
        user_agent: User-Agent header for direct requests
        failures: Optional JSONL recorder for dropped pages
        client: Optional preconfigured httpx client (owned by the caller)

    Example:
        >>> async with PageFetcher("https://dev.example.com", extractor) as fetcher:
        ...     result = await fetcher.fetch("/docs/intro", "Getting Started")
    """

    def __init__(
        self,
        base_url: str,
        extractor: PageExtractor,
        renderer: Renderer | None = None,
        thin_page_tokens: int = 200,
        timeout: float = 30.0,
        user_agent: str = "DocSpider/1.0",
        failures: FailedPageLogger | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.extractor = extractor
        self.renderer = renderer
        self.thin_page_tokens = thin_page_tokens
        self.failures = failures
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent, "Accept": "text/html"},
        )

    async def fetch(self, path: str, section: str) -> CrawlResult | None:
        """Fetch one page and extract its content.

        Args:
            path: Site-relative page path
            section: Section tag carried into the result

        Returns:
            CrawlResult on success, None when the direct request fails or
            returns a non-success status (the failure is logged)
        """
        url = f"{self.base_url}{path}"

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            self._record_failure(path, url, section, "fetch", exc)
            return None

        if not response.is_success:
            self._record_failure(
                path, url, section, "fetch", f"HTTP {response.status_code}"
            )
            return None

        direct = self.extractor.extract(response.text, path)
        rendered = None
        if self.renderer is not None and is_thin(direct, self.thin_page_tokens):
            logger.info(
                f"Thin page ({estimate_tokens(direct.markdown)} tokens), "
                f"rendering: {path}"
            )
            rendered = await self._render(self.renderer, path, url, section)

        chosen, method = choose_content(direct, rendered)
        return CrawlResult(
            url=url,
            path=path,
            section=section,
            title=chosen.title,
            description=chosen.description,
            markdown=chosen.markdown,
            discovered_paths=chosen.links,
            fetch_method=method,
        )

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> PageFetcher:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _render(
        self, renderer: Renderer, path: str, url: str, section: str
    ) -> ExtractedPage | None:
        try:
            html = await renderer.render(url)
        except RenderError as exc:
            # Direct result stands when rendering fails
            logger.warning(f"Render failed, keeping direct result for {path}: {exc}")
            if self.failures is not None:
                self.failures.log_failure(path, url, section, "render", exc)
            return None
        return self.extractor.extract(html, path)

    def _record_failure(
        self, path: str, url: str, section: str, stage: str, error: Exception | str
    ) -> None:
        logger.warning(f"[{stage}] {url}: {error}")
        if self.failures is not None:
            self.failures.log_failure(path, url, section, stage, error)
