"""Structured logging with rotation for the documentation spider.

This module provides a configured logger with console and rotating file handlers.
Logs are human-readable with timestamp, level, module, and message.

Examples:
    >>> from docspider.core.logger import get_logger
    >>> logger = get_logger("docspider")
    >>> logger.info("Crawling: /docs/getting-started")
    2026-10-18 09:12:00,123 | INFO | docspider | Crawling: /docs/getting-started
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# timestamp | level | logger name | message
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

DEFAULT_LOG_FILE = Path(".cache/docspider.log")

# Rotating file handler limits (100MB max file size, 5 backup files)
MAX_LOG_SIZE_BYTES = 100 * 1024 * 1024
BACKUP_COUNT = 5


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure a logger with console and rotating file output.

    The console shows records at ``log_level`` and above, so ``LOG_LEVEL=DEBUG``
    surfaces per-page fetch and render detail. The rotating log file always
    records DEBUG, whatever the console level, so a quiet run can still be
    inspected afterwards.

    Configuring the package logger ("docspider") is enough for every module,
    since modules log through ``logging.getLogger(__name__)`` children.

    Args:
        name: Logger name (typically "docspider")
        log_level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            case-insensitive
        log_file: Rotating log file path, defaults to .cache/docspider.log.
            Parent directories are created automatically.

    Returns:
        The configured logger. Calling again replaces (and closes) its handlers.

    Raises:
        ValueError: If log_level is not a valid logging level name.
    """
    console_level = logging.getLevelName(log_level.upper())
    if not isinstance(console_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(LOG_FORMAT)
    log_file = log_file or DEFAULT_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handlers: list[tuple[logging.Handler, int]] = [
        (logging.StreamHandler(), console_level),
        (
            RotatingFileHandler(
                log_file, maxBytes=MAX_LOG_SIZE_BYTES, backupCount=BACKUP_COUNT
            ),
            logging.DEBUG,
        ),
    ]
    for handler, level in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
