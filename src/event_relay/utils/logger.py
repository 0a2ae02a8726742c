"""
Module: logger.py
Description: Structured logging configuration for the event relay.

Configures structlog for single-line JSON output so relay activity can be
read alongside the host application's own logs.

Key Components:
- JSON output with timestamp and level processors
- configure_logging() to apply the configured level filter
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging
from datetime import datetime, timezone
from typing import Optional, TextIO

import structlog


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """
    Configure structlog for JSON output at the given level.

    Safe to call more than once; the last call wins.

    Args:
        level: Standard logging level name (DEBUG, INFO, ...)
        stream: Output stream (default: stdout)
    """
    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )


configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Events queued", row_count=3)
        {"row_count": 3, "event": "Events queued", "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
