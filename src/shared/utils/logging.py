"""Logging setup for the command-line entry points.

Entry points call :func:`setup_logging` once; library modules only create
module-level loggers with ``logging.getLogger(__name__)``.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import Iterable, Optional

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
PLAIN_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# HTTP client and browser driver chatter stays out of progress output
NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "playwright")


def resolve_level(level: Optional[str] = None) -> int:
    """Map a level name (or ``LOG_LEVEL``) to a logging constant, INFO if unknown."""
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(
    level: Optional[str] = None,
    format_string: Optional[str] = None,
    include_timestamp: bool = True,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Send log records to stdout.

    Args:
        level: Level name; falls back to the LOG_LEVEL env var, then INFO.
        format_string: Custom format string.
        include_timestamp: Prefix records with the time when no format is given.
        quiet: Loggers capped at WARNING.

    Example:
        >>> setup_logging(level="DEBUG")
        >>> logging.getLogger(__name__).debug("Debug message")
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT if include_timestamp else PLAIN_FORMAT

    logging.basicConfig(
        level=resolve_level(level),
        format=format_string,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    for logger_name in quiet:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
