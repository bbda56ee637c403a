from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "context_tree"

_LOGGING_CONFIGURED = False


def setup_logging(filename: str | Path | None = None, level: str = "INFO") -> structlog.BoundLogger:
    """Set up structured logging for the context_tree package.

    Only the first call configures handlers; later calls just return a logger.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR). Unknown names mean INFO.

    Returns:
        A structlog logger instance configured for the context_tree package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if not _LOGGING_CONFIGURED:
        numeric_level = parse_log_level(level)
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=numeric_level,
            handlers=handlers,
            format="%(message)s",
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    return get_logger()


def parse_log_level(level: str) -> int:
    """Map a level name to a stdlib logging level, accepting WARN as WARNING.

    Args:
        level: level name, case-insensitive

    Returns:
        int: the numeric logging level, INFO for unknown names
    """
    name = (level or "").strip().upper()
    if name == "WARN":
        name = "WARNING"
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
    }.get(name, logging.INFO)


def get_logger() -> structlog.BoundLogger:
    """Return the package logger used when no logger is injected."""
    return structlog.get_logger(LOGGER_NAME)
