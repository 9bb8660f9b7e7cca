"""Configuration module for the documentation spider.

Provides Pydantic-based configuration management with environment variable
support and field validation.

Example:
    >>> from docspider.core.config import Settings
    >>> settings = Settings(base_url="https://docs.example.com")
    >>> print(settings.concurrency)
    5
"""

from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RendererName = Literal["playwright", "crawl4ai", "none"]


class Settings(BaseSettings):
    """Documentation spider configuration.

    Every field can be overridden with an environment variable of the same
    name (case-insensitive) or through a local ``.env`` file.

    Attributes:
        base_url: Site root that seed and discovered paths are appended to
        seed_file: YAML seed catalog mapping section name to page paths
        link_prefix: Path prefix identifying documentation links to follow
        user_agent: User-Agent header sent with direct requests
        concurrency: Number of concurrent crawl workers
        request_delay_ms: Per-worker delay before each fetch (rate limiting)
        request_timeout: Direct request timeout in seconds
        thin_page_tokens: Pages below this estimate are re-fetched via render
        renderer: Rendering backend used for thin pages
        crawl4ai_base_url: Crawl4AI service URL (renderer="crawl4ai")
        render_timeout: Render timeout in seconds
        render_settle_ms: Extra wait after network idle before capturing markup
        max_chunk_tokens: Upper size bound for a chunk
        min_chunk_tokens: Sections below this size are merged into a neighbour
        min_useful_tokens: Chunks below this size are dropped from the output
        output_dir: Directory receiving manifest.json and chunks/
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Rotating log file path
        failed_pages_log: JSONL file recording pages dropped during a run

    Raises:
        ValidationError: If values are invalid

    Example:
        >>> settings = Settings(concurrency=10, renderer="none")
        >>> settings.output_dir
        PosixPath('docs')
    """

    # Site
    base_url: str = "https://dev.clever.com"
    seed_file: Path = Path("seeds.yaml")
    link_prefix: str = "/docs/"
    user_agent: str = (
        "DocSpider/1.0 (documentation indexer; contact: dev@example.com)"
    )

    # Crawling
    concurrency: int = 5
    request_delay_ms: int = 300
    request_timeout: float = 30.0
    thin_page_tokens: int = 200

    # Rendering
    renderer: RendererName = "playwright"
    crawl4ai_base_url: str = "http://localhost:52004"
    render_timeout: float = 30.0
    render_settle_ms: int = 1500

    # Chunking
    max_chunk_tokens: int = 1500
    min_chunk_tokens: int = 100
    min_useful_tokens: int = 30

    # Output
    output_dir: Path = Path("docs")

    # Logging
    log_level: str = "INFO"
    log_file: Path = Path(".cache/docspider.log")
    failed_pages_log: Path = Path("failed_pages.jsonl")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls: type["Settings"], v: str) -> str:
        """Validate base_url is an absolute http(s) URL.

        Trailing slashes are removed so that seed paths (which start with
        "/") can be appended directly.

        Raises:
            ValueError: If the scheme is not http/https or the host is missing
        """
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("base_url must be an absolute http(s) URL")
        return v.rstrip("/")

    @field_validator("link_prefix")
    @classmethod
    def validate_link_prefix(cls: type["Settings"], v: str) -> str:
        """Validate link_prefix is an absolute path."""
        if not v.startswith("/"):
            raise ValueError("link_prefix must start with '/'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls: type["Settings"], v: str) -> str:
        """Validate log_level is a standard level name (normalized to upper case)."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("concurrency", "max_chunk_tokens", "min_chunk_tokens")
    @classmethod
    def validate_positive(cls: type["Settings"], v: int) -> int:
        """Validate worker count and chunk bounds are positive.

        Raises:
            ValueError: If the value is zero or negative
        """
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    @field_validator(
        "request_delay_ms", "thin_page_tokens", "render_settle_ms", "min_useful_tokens"
    )
    @classmethod
    def validate_non_negative(cls: type["Settings"], v: int) -> int:
        """Validate delays and thresholds are not negative."""
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @field_validator("request_timeout", "render_timeout")
    @classmethod
    def validate_timeout(cls: type["Settings"], v: float) -> float:
        """Validate timeouts are positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @model_validator(mode="after")
    def validate_chunk_bounds(self) -> "Settings":
        """Validate min_useful_tokens < min_chunk_tokens < max_chunk_tokens.

        The degenerate-chunk floor must sit below the merge threshold, and the
        merge threshold below the split threshold, or the chunker would merge
        sections it then immediately re-splits.

        Raises:
            ValueError: If the thresholds are out of order
        """
        if self.min_chunk_tokens >= self.max_chunk_tokens:
            raise ValueError("min_chunk_tokens must be less than max_chunk_tokens")
        if self.min_useful_tokens >= self.min_chunk_tokens:
            raise ValueError("min_useful_tokens must be less than min_chunk_tokens")
        return self

    @property
    def request_delay(self) -> float:
        """Per-worker inter-request delay in seconds."""
        return self.request_delay_ms / 1000

    @property
    def render_settle(self) -> float:
        """Post-idle settle delay in seconds."""
        return self.render_settle_ms / 1000

    @property
    def chunks_dir(self) -> Path:
        """Directory holding one JSON artifact per chunk."""
        return self.output_dir / "chunks"
