"""Content extraction from documentation page markup.

Turns raw HTML into the pieces the rest of the pipeline needs: a title, a
meta description, the main content region as markdown, and the same-site
documentation links the page references.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag
from markdownify import ATX, MarkdownConverter

from docspider.crawl.models import ExtractedPage

# Ordered content-region selectors; the first non-empty match wins
CONTENT_SELECTORS = (
    '[class*="markdown-body"]',
    '[class*="content-body"]',
    "article",
    ".rm-Article",
    "#content",
    "main",
    ".content",
)

# Stripped from <body> when no content region matches
BOILERPLATE_SELECTOR = (
    "nav, header, footer, script, style, [class*='sidebar'], [class*='nav']"
)

# Interactive widgets that do not translate to documentation text
INTERACTIVE_SELECTOR = "button, [class*='try-it'], [class*='playground']"

_LANGUAGE_CLASS = re.compile(r"language-(\w+)")
_TITLE_SUFFIX = re.compile(r" \|.*$")


def code_language(code: Tag) -> str:
    """Infer a fenced-code language tag from a <code> element.

    Looks for a ``language-xxx`` class first, then a ``data-lang`` attribute.

    Returns:
        Language name, or empty string when no hint is present
    """
    for css_class in code.get("class") or []:
        match = _LANGUAGE_CLASS.search(css_class)
        if match:
            return match.group(1)
    data_lang = code.get("data-lang")
    return data_lang if isinstance(data_lang, str) else ""


class DocMarkdownConverter(MarkdownConverter):
    """markdownify converter that keeps code blocks verbatim.

    ``<pre><code>`` blocks become fenced blocks containing the raw code text
    with an optional language tag; everything else uses markdownify defaults
    with ATX headings and ``-`` bullets.
    """

    def __init__(self, **options) -> None:
        options.setdefault("heading_style", ATX)
        options.setdefault("bullets", "-")
        super().__init__(**options)

    def convert_pre(self, el, text, *args, **kwargs):
        code = el.find("code")
        if code is None:
            return super().convert_pre(el, text, *args, **kwargs)
        body = code.get_text().rstrip()
        return f"\n\n```{code_language(code)}\n{body}\n```\n\n"


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment to normalized markdown.

    Args:
        html: Markup fragment

    Returns:
        Markdown text with surrounding whitespace removed
    """
    return DocMarkdownConverter().convert(html).strip()


class PageExtractor:
    """Extracts title, description, markdown and links from page markup.

    Args:
        base_url: Site root; absolute links are kept only on this host
        link_prefix: Path prefix that marks a documentation link

    Example:
        >>> extractor = PageExtractor("https://dev.example.com")
        >>> page = extractor.extract(html, "/docs/getting-started")
        >>> page.title
        'Getting Started'
    """

    def __init__(self, base_url: str, link_prefix: str = "/docs/") -> None:
        self.base_url = base_url.rstrip("/")
        self.link_prefix = link_prefix
        self._host = urlparse(self.base_url).netloc

    def extract(self, html: str, path: str) -> ExtractedPage:
        """Extract one page.

        Links are collected from the untouched document before any element
        is removed for content extraction.

        Args:
            html: Raw page markup
            path: Page path, used as the last-resort title

        Returns:
            ExtractedPage for the markup
        """
        soup = BeautifulSoup(html, "html.parser")
        links = self.discover_paths(soup)
        title = self._extract_title(soup, path)
        description = self._extract_description(soup)

        content = BeautifulSoup(self._content_html(soup), "html.parser")
        for element in content.select(INTERACTIVE_SELECTOR):
            element.decompose()

        return ExtractedPage(
            title=title,
            description=description,
            markdown=html_to_markdown(str(content)),
            links=tuple(links),
        )

    def discover_paths(self, soup: BeautifulSoup) -> list[str]:
        """Collect same-site documentation paths from every ``a[href]``.

        Query strings are stripped, hrefs carrying a fragment are dropped and
        duplicates are removed while keeping first-seen order.
        """
        discovered: dict[str, None] = {}
        for anchor in soup.select("a[href]"):
            href = anchor.get("href")
            if not isinstance(href, str):
                continue
            path = self._to_doc_path(href.strip())
            if path is not None:
                discovered.setdefault(path, None)
        return list(discovered)

    def _to_doc_path(self, href: str) -> str | None:
        if not href or "#" in href:
            return None
        if href.startswith(("http://", "https://")):
            parsed = urlparse(href)
            if parsed.netloc != self._host:
                return None
            href = parsed.path
        path = href.split("?", 1)[0]
        if not path.startswith(self.link_prefix):
            return None
        return path

    def _extract_title(self, soup: BeautifulSoup, path: str) -> str:
        h1 = soup.find("h1")
        if h1 is not None:
            text = h1.get_text().strip()
            if text:
                return text
        title_tag = soup.find("title")
        if title_tag is not None:
            text = _TITLE_SUFFIX.sub("", title_tag.get_text()).strip()
            if text:
                return text
        return path.rstrip("/").split("/")[-1]

    def _extract_description(self, soup: BeautifulSoup) -> str:
        for attrs in ({"name": "description"}, {"property": "og:description"}):
            meta = soup.find("meta", attrs=attrs)
            if meta is not None:
                content = meta.get("content")
                if isinstance(content, str):
                    return content
        return ""

    def _content_html(self, soup: BeautifulSoup) -> str:
        for selector in CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                inner = element.decode_contents()
                if inner.strip():
                    return inner

        # No content region matched: whole body minus navigation/boilerplate
        for element in soup.select(BOILERPLATE_SELECTOR):
            element.decompose()
        body = soup.body
        return body.decode_contents() if body is not None else soup.decode_contents()
