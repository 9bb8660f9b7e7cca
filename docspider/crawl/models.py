"""Data models for crawl operations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

DISCOVERED_SECTION = "Discovered"


def _default_timestamp() -> str:
    """Generate default ISO8601 timestamp string."""
    return datetime.now(timezone.utc).isoformat()


class FetchMethod(str, Enum):
    """How the content of a page was obtained."""

    DIRECT = "direct"
    RENDERED = "rendered"


@dataclass(frozen=True)
class PageTask:
    """A page waiting in the crawl frontier.

    Identity is the path: two tasks with the same path and different
    sections are duplicates, and only the first one dequeued is fetched.

    Args:
        path: Site-relative page path (e.g. "/docs/getting-started")
        section: Catalog section the page was seeded from, or "Discovered"
    """

    path: str
    section: str


@dataclass(frozen=True)
class ExtractedPage:
    """Result of extracting one page's markup.

    Args:
        title: Page title
        description: Meta description, empty string if absent
        markdown: Main content converted to markdown
        links: Same-site documentation paths referenced by the page,
            in first-seen order without duplicates
    """

    title: str
    description: str
    markdown: str
    links: tuple[str, ...] = ()


@dataclass(frozen=True)
class CrawlResult:
    """Result of crawling a single documentation page.

    Args:
        url: Absolute URL that was fetched
        path: Site-relative page path
        section: Section tag from the task that produced this result
        title: Page title
        description: Meta description
        markdown: Normalized page content
        discovered_paths: Same-site documentation paths linked from the page
        crawled_at: When the crawl occurred (ISO8601 string)
        fetch_method: Whether the kept content came from a direct request
            or a full render
    """

    url: str
    path: str
    section: str
    title: str
    description: str
    markdown: str
    discovered_paths: tuple[str, ...] = ()
    crawled_at: str = field(default_factory=_default_timestamp)
    fetch_method: FetchMethod = FetchMethod.DIRECT
