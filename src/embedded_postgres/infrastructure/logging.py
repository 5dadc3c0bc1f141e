"""structlog setup for lifecycle events.

Server output (initdb, postgres) never goes through here; it is captured by
BufferedLog and copied to the caller's sink. This module only shapes the
library's own events, which default to stderr so the two streams stay apart.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Keys whose values never reach a log line.
_SECRET_KEYS = frozenset({"password", "pwfile_content"})


def redact_secrets(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Mask credential values bound into an event."""
    for key in _SECRET_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def setup_logging(
    level: str = "INFO",
    log_format: str = "console",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog for embedded Postgres events.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        log_format: "json" for one object per line, "console" for humans.
        stream: Destination (stderr if None).
    """
    stream = stream or sys.stderr
    numeric_level = logging.getLevelName(level.upper())
    logging.basicConfig(format="%(message)s", stream=stream, level=numeric_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Return a logger for ``name`` with ``initial_context`` bound, e.g. port and version."""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger
