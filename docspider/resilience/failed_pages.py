"""Failed page logging for crawl runs.

Provides structured JSONL logging for pages that were dropped during a crawl.
Each failure is logged with the page path, section, pipeline stage and error
details so dropped pages can be inspected after a run without re-crawling.

Example:
    >>> from pathlib import Path
    >>> from docspider.resilience.failed_pages import FailedPageLogger
    >>>
    >>> failures = FailedPageLogger(Path("failed_pages.jsonl"))
    >>> failures.log_failure(
    ...     path="/docs/missing",
    ...     url="https://dev.example.com/docs/missing",
    ...     section="Getting Started",
    ...     stage="fetch",
    ...     error="HTTP 404",
    ... )
"""

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import TypedDict


class FailedPageEntry(TypedDict):
    """Schema for JSONL log entries of dropped pages.

    Attributes:
        path: Site-relative page path
        url: Absolute URL that was requested
        section: Section tag of the dropped task
        timestamp: ISO 8601 timestamp with timezone (UTC)
        stage: Pipeline stage that failed (fetch, render, extract, crawl)
        error_type: Exception class name, or "HTTPStatus" for bad responses
        error_message: Human-readable error message
    """

    path: str
    url: str
    section: str
    timestamp: str
    stage: str
    error_type: str
    error_message: str


class FailedPageLogger:
    """Logger for pages dropped during a crawl.

    Entries are appended as one JSON object per line. Writes are serialized
    with a lock so concurrent workers never interleave partial lines.

    Attributes:
        log_path: Path to the JSONL log file
    """

    def __init__(self, log_path: Path) -> None:
        """Initialize the failed page logger.

        Args:
            log_path: Path to the JSONL log file where failures will be recorded
        """
        self.log_path = log_path
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Truncate the log at the start of a run.

        Every run rebuilds the knowledge base from scratch, so failures from
        earlier runs are no longer meaningful.
        """
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_path.write_text("")

    def log_failure(
        self,
        path: str,
        url: str,
        section: str,
        stage: str,
        error: Exception | str,
    ) -> None:
        """Record one dropped page.

        Args:
            path: Site-relative page path
            url: Absolute URL that was requested
            section: Section tag of the dropped task
            stage: Pipeline stage that failed
            error: Exception raised, or a message for non-exception failures
                such as a non-success HTTP status
        """
        if isinstance(error, Exception):
            error_type = type(error).__name__
            error_message = str(error)
        else:
            error_type = "HTTPStatus" if error.startswith("HTTP ") else "Error"
            error_message = error

        entry: FailedPageEntry = {
            "path": path,
            "url": url,
            "section": section,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stage": stage,
            "error_type": error_type,
            "error_message": error_message,
        }

        with self._lock:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")

    def read_entries(self) -> list[FailedPageEntry]:
        """Read back all recorded failures, oldest first."""
        if not self.log_path.exists():
            return []
        with open(self.log_path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
