"""Full-page rendering backends for client-side hydrated documentation pages.

A renderer loads a URL the way a browser would, waits for the network to go
idle plus a fixed settle delay, and returns the resulting markup. Two backends
are provided:

- PlaywrightRenderer: drives a local headless Chromium. One browser is shared
  by all workers; every render opens and closes its own browser context so
  no cookies or session state leak between pages.
- Crawl4AIRenderer: delegates rendering to a Crawl4AI service over HTTP.

Example:
    >>> async with PlaywrightRenderer(timeout=30.0, settle=1.5) as renderer:
    ...     html = await renderer.render("https://dev.example.com/docs/intro")
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import httpx
from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from docspider.core.config import Settings

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """Raised when a page cannot be rendered (timeout, browser or service error)."""


class Renderer(Protocol):
    """Protocol for rendering backends used by the fetcher."""

    async def render(self, url: str) -> str:
        """Return fully-loaded markup for url.

        Raises:
            RenderError: If rendering fails or times out
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


class PlaywrightRenderer:
    """Render pages with a shared headless Chromium instance.

    The browser is launched lazily on the first render and reused by every
    subsequent call until close().

    Args:
        timeout: Navigation timeout in seconds
        settle: Seconds to wait after network idle before reading the DOM
        user_agent: User-Agent for every browser context
        headless: Run Chromium without a window
    """

    def __init__(
        self,
        timeout: float = 30.0,
        settle: float = 1.5,
        user_agent: str | None = None,
        headless: bool = True,
    ) -> None:
        self.timeout = timeout
        self.settle = settle
        self.user_agent = user_agent
        self.headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._launch_lock = asyncio.Lock()

    async def render(self, url: str) -> str:
        """Render url and return the page markup.

        Raises:
            RenderError: On navigation timeout or any browser failure
        """
        browser = await self._ensure_browser()
        context_args: dict[str, Any] = {}
        if self.user_agent:
            context_args["user_agent"] = self.user_agent

        context: BrowserContext | None = None
        try:
            context = await browser.new_context(**context_args)
            page = await context.new_page()
            await page.goto(
                url, wait_until="networkidle", timeout=self.timeout * 1000
            )
            await page.wait_for_timeout(self.settle * 1000)
            return await page.content()
        except Exception as exc:
            raise RenderError(f"Render failed for {url}: {exc}") from exc
        finally:
            if context is not None:
                await self._close_context(context, url)

    async def close(self) -> None:
        """Close the shared browser and stop Playwright."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def __aenter__(self) -> PlaywrightRenderer:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _close_context(self, context: BrowserContext, url: str) -> None:
        try:
            await context.close()
        except Exception as exc:
            # Must not replace the render outcome
            logger.warning(f"Failed to close browser context for {url}: {exc}")

    async def _ensure_browser(self) -> Browser:
        async with self._launch_lock:
            if self._browser is None:
                try:
                    self._playwright = await async_playwright().start()
                    self._browser = await self._playwright.chromium.launch(
                        headless=self.headless
                    )
                except Exception as exc:
                    raise RenderError(f"Failed to launch browser: {exc}") from exc
                logger.debug("Launched headless Chromium for rendering")
            return self._browser


class Crawl4AIRenderer:
    """Render pages through the Crawl4AI /crawl endpoint.

    Args:
        endpoint_url: Base URL for the Crawl4AI service
        timeout: Render timeout in seconds (applied to page load and request)
        settle: Seconds to wait after network idle before capturing markup
        user_agent: User-Agent for the service's browser
    """

    def __init__(
        self,
        endpoint_url: str,
        timeout: float = 30.0,
        settle: float = 1.5,
        user_agent: str | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url.rstrip("/")
        self.timeout = timeout
        self.settle = settle
        self.user_agent = user_agent
        # Service round-trip gets headroom over the in-browser page timeout
        self._client = httpx.AsyncClient(
            base_url=self._endpoint_url, timeout=timeout + settle + 10.0
        )

    async def render(self, url: str) -> str:
        """Render url via Crawl4AI and return its HTML.

        Raises:
            RenderError: On transport errors, non-2xx responses or an
                unsuccessful crawl result
        """
        browser_config: dict[str, Any] = {"headless": True}
        if self.user_agent:
            browser_config["user_agent"] = self.user_agent
        payload = {
            "urls": [url],
            "browser_config": browser_config,
            "crawler_config": {
                "wait_until": "networkidle",
                "delay_before_return_html": self.settle,
                "page_timeout": int(self.timeout * 1000),
            },
        }

        try:
            response = await self._client.post("/crawl", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RenderError(f"Render request failed for {url}: {exc}") from exc

        try:
            results = response.json().get("results", [])
            result = results[0] if results else None
            if result is None:
                raise RenderError(f"No render results returned for {url}")
            success = result.get("success", False)
            error_msg = result.get("error_message", "Unknown error")
            html = result.get("html") or ""
        except (ValueError, AttributeError, TypeError, KeyError) as exc:
            raise RenderError(f"Malformed render response for {url}: {exc}") from exc

        if not success:
            raise RenderError(f"Render failed for {url}: {error_msg}")

        if not html:
            raise RenderError(f"Render returned no markup for {url}")
        return html

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Crawl4AIRenderer:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_renderer(settings: Settings) -> Renderer | None:
    """Build the renderer selected by settings.renderer.

    Returns:
        Renderer instance, or None when rendering is disabled
    """
    if settings.renderer == "playwright":
        return PlaywrightRenderer(
            timeout=settings.render_timeout,
            settle=settings.render_settle,
            user_agent=settings.user_agent,
        )
    if settings.renderer == "crawl4ai":
        return Crawl4AIRenderer(
            endpoint_url=settings.crawl4ai_base_url,
            timeout=settings.render_timeout,
            settle=settings.render_settle,
            user_agent=settings.user_agent,
        )
    return None
