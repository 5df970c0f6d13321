"""Observability helpers for the access journal."""

from access_journal.observability.logging import get_logger, set_journal_context, setup_logging

__all__ = ["get_logger", "set_journal_context", "setup_logging"]
