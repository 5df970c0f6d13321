"""Structured logging configuration with journal context support.

This module sets up structured logging using structlog with JSON or console
output. Library modules keep using ``logging.getLogger(__name__)``; once
setup_logging() has run, their records and structlog events share one output.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Any, Optional

import structlog

# Context variable holding the journal directory the current command works on
journal_dir_var: ContextVar[Optional[str]] = ContextVar("journal_dir", default=None)


def add_journal_dir(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add the journal directory to a log event if available.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Event dictionary to modify

    Returns:
        Modified event dictionary with journal_dir
    """
    journal_dir = journal_dir_var.get()
    if journal_dir:
        event_dict["journal_dir"] = journal_dir
    return event_dict


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output logs in JSON format; otherwise use console format

    Example:
        >>> setup_logging(log_level="INFO", json_logs=True)
        >>> logger = get_logger(__name__)
        >>> logger.info("journal_opened", base_dir="/tmp/cache")
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        add_journal_dir,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def set_journal_context(journal_dir: Optional[str]) -> None:
    """Set (or clear, with None) the journal directory for the current context.

    Args:
        journal_dir: Directory of the journal being worked on
    """
    journal_dir_var.set(journal_dir)

