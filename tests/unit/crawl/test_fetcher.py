"""Unit tests for PageFetcher direct fetch and thin-page rendering."""

from pathlib import Path

import httpx
import pytest
import respx

from docspider.crawl.extractor import PageExtractor
from docspider.crawl.fetcher import PageFetcher, choose_content, is_thin
from docspider.crawl.models import ExtractedPage, FetchMethod
from docspider.crawl.renderer import Crawl4AIRenderer, RenderError
from docspider.resilience.failed_pages import FailedPageLogger
from tests.fixtures.pages import (
    BASE_URL,
    DOC_PAGE_HTML,
    THIN_SHELL_HTML,
    rendered_page_html,
)


class FakeRenderer:
    """Renderer double returning canned markup or raising RenderError."""

    def __init__(self, html: str = "", error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[str] = []

    async def render(self, url: str) -> str:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.html

    async def close(self) -> None:
        return None


def _page(tokens: int) -> ExtractedPage:
    return ExtractedPage(title="T", description="", markdown="x" * (tokens * 4))


class TestChooseContent:
    """Test the keep-larger content policy."""

    def test_rendered_wins_when_larger(self) -> None:
        """Test that a 500-token render replaces a 10-token direct result."""
        direct, rendered = _page(10), _page(500)

        chosen, method = choose_content(direct, rendered)

        assert chosen is rendered
        assert method is FetchMethod.RENDERED

    def test_direct_kept_on_tie(self) -> None:
        """Test that equal sizes keep the direct result."""
        direct, rendered = _page(50), _page(50)

        chosen, method = choose_content(direct, rendered)

        assert chosen is direct
        assert method is FetchMethod.DIRECT

    def test_direct_kept_when_render_missing(self) -> None:
        """Test that a failed render keeps the direct result."""
        direct = _page(10)

        assert choose_content(direct, None) == (direct, FetchMethod.DIRECT)

    def test_is_thin_threshold(self) -> None:
        """Test that thinness is strictly below the threshold."""
        assert is_thin(_page(199), 200)
        assert not is_thin(_page(200), 200)


@respx.mock
@pytest.mark.asyncio
async def test_fetch_direct_page() -> None:
    """Test that a substantial page is returned without rendering."""
    respx.get(f"{BASE_URL}/docs/getting-started").mock(
        return_value=httpx.Response(200, text=DOC_PAGE_HTML)
    )
    renderer = FakeRenderer(html=rendered_page_html())

    async with PageFetcher(
        BASE_URL, PageExtractor(BASE_URL), renderer=renderer, thin_page_tokens=5
    ) as fetcher:
        result = await fetcher.fetch("/docs/getting-started", "Getting Started")

    assert result is not None
    assert result.url == f"{BASE_URL}/docs/getting-started"
    assert result.section == "Getting Started"
    assert result.title == "Getting Started"
    assert result.fetch_method is FetchMethod.DIRECT
    assert result.discovered_paths == ("/docs/intro", "/docs/oauth", "/docs/sso")
    assert renderer.calls == []


@respx.mock
@pytest.mark.asyncio
async def test_fetch_thin_page_uses_larger_render() -> None:
    """Test that a thin direct result is rendered and the larger render kept."""
    respx.get(f"{BASE_URL}/docs/rostering").mock(
        return_value=httpx.Response(200, text=THIN_SHELL_HTML)
    )
    renderer = FakeRenderer(html=rendered_page_html())

    async with PageFetcher(BASE_URL, PageExtractor(BASE_URL), renderer=renderer) as fetcher:
        result = await fetcher.fetch("/docs/rostering", "Rostering")

    assert result is not None
    assert renderer.calls == [f"{BASE_URL}/docs/rostering"]
    assert result.fetch_method is FetchMethod.RENDERED
    assert result.title == "Rostering"
    assert "Rostering paragraph 39" in result.markdown
    assert result.discovered_paths == ("/docs/rostering-sections",)


@respx.mock
@pytest.mark.asyncio
async def test_fetch_thin_page_without_renderer() -> None:
    """Test that thin pages are kept as-is when rendering is disabled."""
    respx.get(f"{BASE_URL}/docs/rostering").mock(
        return_value=httpx.Response(200, text=THIN_SHELL_HTML)
    )

    async with PageFetcher(BASE_URL, PageExtractor(BASE_URL)) as fetcher:
        result = await fetcher.fetch("/docs/rostering", "Rostering")

    assert result is not None
    assert result.fetch_method is FetchMethod.DIRECT
    assert result.markdown == "Loading"


@respx.mock
@pytest.mark.asyncio
async def test_render_failure_keeps_direct_result(tmp_path: Path) -> None:
    """Test that a RenderError is recorded and the direct extraction returned."""
    respx.get(f"{BASE_URL}/docs/rostering").mock(
        return_value=httpx.Response(200, text=THIN_SHELL_HTML)
    )
    failures = FailedPageLogger(tmp_path / "failed.jsonl")
    renderer = FakeRenderer(error=RenderError("navigation timeout"))

    async with PageFetcher(
        BASE_URL, PageExtractor(BASE_URL), renderer=renderer, failures=failures
    ) as fetcher:
        result = await fetcher.fetch("/docs/rostering", "Rostering")

    assert result is not None
    assert result.fetch_method is FetchMethod.DIRECT
    entries = failures.read_entries()
    assert len(entries) == 1
    assert entries[0]["stage"] == "render"
    assert entries[0]["error_type"] == "RenderError"


@respx.mock
@pytest.mark.asyncio
async def test_malformed_crawl4ai_response_keeps_direct_result(tmp_path: Path) -> None:
    """Test that a non-JSON render service reply falls back to the direct result."""
    respx.get(f"{BASE_URL}/docs/rostering").mock(
        return_value=httpx.Response(200, text=THIN_SHELL_HTML)
    )
    respx.post("http://localhost:52004/crawl").mock(
        return_value=httpx.Response(200, text="<html>Bad Gateway</html>")
    )
    failures = FailedPageLogger(tmp_path / "failed.jsonl")

    async with Crawl4AIRenderer("http://localhost:52004") as renderer:
        async with PageFetcher(
            BASE_URL, PageExtractor(BASE_URL), renderer=renderer, failures=failures
        ) as fetcher:
            result = await fetcher.fetch("/docs/rostering", "Rostering")

    assert result is not None
    assert result.fetch_method is FetchMethod.DIRECT
    assert result.markdown == "Loading"
    entries = failures.read_entries()
    assert [entry["stage"] for entry in entries] == ["render"]
    assert entries[0]["error_type"] == "RenderError"


@respx.mock
@pytest.mark.asyncio
async def test_fetch_http_error_status_returns_none(tmp_path: Path) -> None:
    """Test that a non-success status drops the page and records it."""
    respx.get(f"{BASE_URL}/docs/missing").mock(return_value=httpx.Response(404))
    failures = FailedPageLogger(tmp_path / "failed.jsonl")

    async with PageFetcher(BASE_URL, PageExtractor(BASE_URL), failures=failures) as fetcher:
        result = await fetcher.fetch("/docs/missing", "Getting Started")

    assert result is None
    entries = failures.read_entries()
    assert entries[0]["path"] == "/docs/missing"
    assert entries[0]["stage"] == "fetch"
    assert entries[0]["error_type"] == "HTTPStatus"
    assert entries[0]["error_message"] == "HTTP 404"


@respx.mock
@pytest.mark.asyncio
async def test_fetch_transport_error_returns_none(tmp_path: Path) -> None:
    """Test that connection errors drop the page instead of raising."""
    respx.get(f"{BASE_URL}/docs/down").mock(side_effect=httpx.ConnectError("refused"))
    failures = FailedPageLogger(tmp_path / "failed.jsonl")

    async with PageFetcher(BASE_URL, PageExtractor(BASE_URL), failures=failures) as fetcher:
        result = await fetcher.fetch("/docs/down", "Getting Started")

    assert result is None
    assert failures.read_entries()[0]["error_type"] == "ConnectError"


@pytest.mark.asyncio
async def test_injected_client_is_not_closed() -> None:
    """Test that a caller-provided client stays open after close()."""
    client = httpx.AsyncClient()
    fetcher = PageFetcher(BASE_URL, PageExtractor(BASE_URL), client=client)

    await fetcher.close()

    assert not client.is_closed
    await client.aclose()
