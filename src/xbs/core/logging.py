"""Structured logging with correlation IDs.

This module configures structlog for structured logging with correlation
ID tracking for request tracing. Output goes to stdout, or is appended to
``log_file`` when one is configured.
"""

import logging
import sys
import uuid
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

from xbs.core.config import get_settings

# Open handle of the configured log file, if any.
_log_stream: TextIO | None = None


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add correlation ID to log entry if present in context.

    Args:
        logger: Logger instance (unused).
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with correlation_id.
    """
    if "correlation_id" not in event_dict:
        event_dict["correlation_id"] = f"cid_{uuid.uuid4().hex[:12]}"
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log entry preferring the name bound by get_logger.

    Args:
        logger: Logger instance.
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with logger name.
    """
    name = event_dict.pop("logger_name", None)
    event_dict["logger"] = name or getattr(logger, "name", "xbs")
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' field to 'message' for compatibility."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _open_stream(log_file: str | None) -> TextIO:
    """Return the stream log lines are written to."""
    global _log_stream

    close_logging()
    if log_file:
        _log_stream = open(log_file, "a", encoding="utf-8")
        return _log_stream
    return sys.stdout


def configure_logging(settings: Any | None = None) -> None:
    """Configure structured logging for the application.

    Sets up structlog with console formatting for development and JSON
    formatting otherwise.

    Args:
        settings: Optional settings instance. If not provided, will load from environment.
    """
    if settings is None:
        settings = get_settings()

    level = getattr(logging, settings.log_level)
    stream = _open_stream(settings.log_file)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
        rename_message_field,
    ]

    if settings.is_development or settings.log_format == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(
            colors=stream is sys.stdout,
            exception_formatter=structlog.dev.plain_traceback,
        )
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # Configure standard logging for third-party libraries
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=level,
        force=True,
    )

    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(logger_name).setLevel(level)


def close_logging() -> None:
    """Flush and close the log file opened by configure_logging, if any."""
    global _log_stream

    if _log_stream is not None:
        # Detach both structlog and stdlib logging before the file goes away
        structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stdout))
        logging.basicConfig(format="%(message)s", stream=sys.stdout, force=True)
        _log_stream.flush()
        _log_stream.close()
        _log_stream = None


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If not provided, uses 'xbs'.

    Returns:
        BoundLogger: Configured structured logger instance.
    """
    # PrintLogger has no name, so it travels as a bound value
    return structlog.get_logger(logger_name=name or "xbs")


def bind_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current logging context.

    Called by the request middleware with the ID taken from the request
    headers or freshly generated.

    Args:
        correlation_id: The correlation ID to bind to the context.
    """
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    """Clear all context variables from the current logging context."""
    structlog.contextvars.clear_contextvars()
