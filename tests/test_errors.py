"""Tests for the journal exception hierarchy."""

from access_journal.errors import (
    JournalClosedError,
    JournalError,
    JournalIOError,
    LockTimeoutError,
    SnapshotClosedError,
)


class TestJournalErrors:
    """Tests for error codes and context."""

    def test_io_error_carries_context(self) -> None:
        """JournalIOError should describe the failed operation."""
        error = JournalIOError("put", "/tmp/journal.db", "disk I/O error")
        assert isinstance(error, JournalError)
        assert error.error_code == "journal_io_error"
        assert error.context == {
            "operation": "put",
            "location": "/tmp/journal.db",
            "reason": "disk I/O error",
        }
        assert "put" in str(error)

    def test_lock_timeout(self) -> None:
        """LockTimeoutError should name the cache and the timeout."""
        error = LockTimeoutError("/tmp/journal-1.lock", "journal cache", 500)
        assert error.error_code == "lock_timeout"
        assert "journal cache" in error.message
        assert "500ms" in error.message

    def test_closed_errors(self) -> None:
        """Closed errors should have distinct codes."""
        assert JournalClosedError("journal cache").error_code == "journal_closed"
        assert SnapshotClosedError().error_code == "snapshot_closed"
        assert SnapshotClosedError().context == {}
