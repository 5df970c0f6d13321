"""Pytest configuration and shared fixtures for the test suite."""

from pathlib import Path
from typing import Iterator

import pytest

from access_journal.config import JournalConfig
from access_journal.journal import DefaultFileAccessTimeJournal


class FakeClock:
    """Controllable millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> int:
        self.now += millis
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Directory under which test journals are created."""
    return tmp_path / "caches"


@pytest.fixture
def journal_config(base_dir: Path) -> JournalConfig:
    """Journal configuration with a short lock timeout.

    Args:
        base_dir: Temporary base directory
    """
    return JournalConfig(base_dir=base_dir, lock_timeout_ms=2_000)


@pytest.fixture
def journal(
    journal_config: JournalConfig, clock: FakeClock
) -> Iterator[DefaultFileAccessTimeJournal]:
    """Open a journal in a temporary directory, closed after the test.

    Yields:
        Open journal whose inception timestamp is the fake clock's start time
    """
    journal = DefaultFileAccessTimeJournal(journal_config, clock=clock)
    yield journal
    journal.stop()
