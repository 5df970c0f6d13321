"""Custom exceptions for the access time journal.

This module defines the exception hierarchy for journal errors, providing
structured error handling with error codes and context.
"""

from typing import Any, Optional


class JournalError(Exception):
    """Base exception for all journal errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        context: Additional context information about the error
    """

    def __init__(
        self, message: str, error_code: str, context: Optional[dict[str, Any]] = None
    ) -> None:
        """Initialize journal error.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code
            context: Optional additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}


class JournalIOError(JournalError):
    """Raised when the backing store or a side file cannot be read or written.

    Covers disk errors, permission errors and corrupt stores. The original
    exception is always chained as ``__cause__``.
    """

    def __init__(self, operation: str, location: str, reason: str) -> None:
        """Initialize journal I/O error.

        Args:
            operation: Operation that failed (e.g. "put", "load_properties")
            location: Path of the file or store involved
            reason: Description of the underlying failure
        """
        super().__init__(
            message=f"Journal {operation} failed for '{location}': {reason}",
            error_code="journal_io_error",
            context={"operation": operation, "location": location, "reason": reason},
        )
        self.operation = operation
        self.location = location
        self.reason = reason


class LockTimeoutError(JournalError):
    """Raised when the cross-process lock cannot be acquired in time."""

    def __init__(self, lock_file: str, display_name: str, timeout_ms: int) -> None:
        """Initialize lock timeout error.

        Args:
            lock_file: Path of the lock file
            display_name: Human-readable name of the locked cache
            timeout_ms: Timeout that elapsed, in milliseconds
        """
        super().__init__(
            message=(
                f"Timeout waiting to lock {display_name} ({lock_file}). "
                f"It is currently in use by another process (waited {timeout_ms}ms)"
            ),
            error_code="lock_timeout",
            context={
                "lock_file": lock_file,
                "display_name": display_name,
                "timeout_ms": timeout_ms,
            },
        )
        self.lock_file = lock_file
        self.timeout_ms = timeout_ms


class JournalClosedError(JournalError):
    """Raised when a journal or cache is used after it has been closed."""

    def __init__(self, display_name: str) -> None:
        """Initialize journal closed error.

        Args:
            display_name: Human-readable name of the closed resource
        """
        super().__init__(
            message=f"{display_name} has been closed",
            error_code="journal_closed",
            context={"display_name": display_name},
        )


class SnapshotClosedError(JournalError):
    """Raised when a snapshot is read after it has been closed."""

    def __init__(self) -> None:
        """Initialize snapshot closed error."""
        super().__init__(
            message="Snapshot has been closed",
            error_code="snapshot_closed",
        )
