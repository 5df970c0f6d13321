"""Access journal - persistent last access times for cached files.

The journal records when files were last used, so cache cleanup can find cold
entries without relying on filesystem access times.
"""

from access_journal.config import JournalConfig
from access_journal.errors import (
    JournalClosedError,
    JournalError,
    JournalIOError,
    LockTimeoutError,
    SnapshotClosedError,
)
from access_journal.journal import (
    CACHE_KEY,
    FILE_ACCESS_CACHE_NAME,
    DefaultFileAccessTimeJournal,
    DefaultSnapshot,
    FileAccessTimeJournal,
    FileAccessTimeJournalSnapshot,
)
from access_journal.locking import LockMode
from access_journal.tracker import SingleDepthFileAccessTracker

__version__ = "0.1.0"

__all__ = [
    "CACHE_KEY",
    "FILE_ACCESS_CACHE_NAME",
    "DefaultFileAccessTimeJournal",
    "DefaultSnapshot",
    "FileAccessTimeJournal",
    "FileAccessTimeJournalSnapshot",
    "JournalClosedError",
    "JournalConfig",
    "JournalError",
    "JournalIOError",
    "LockMode",
    "LockTimeoutError",
    "SingleDepthFileAccessTracker",
    "SnapshotClosedError",
]
