"""File access time journal.

The journal records, per file, when it was last accessed, so a cleanup pass
can find cold cache entries without relying on filesystem access times. It
lives in a persistent cache directory shared by every process using the same
base directory, and is locked on demand so opening it never blocks.

Example:
    >>> with DefaultFileAccessTimeJournal.open(Path("~/.cache/builds")) as journal:
    ...     journal.set_last_access_time(Path("/cache/entry"), 1_700_000_000_000)
    ...     with journal.create_snapshot() as snapshot:
    ...         snapshot.get_last_access_time(Path("/cache/entry"))
    1700000000000
"""

import logging
import os
from pathlib import Path
from types import TracebackType
from typing import Optional, Protocol, Union

from access_journal.cache import PersistentCache
from access_journal.clock import Clock, current_time_millis
from access_journal.config import JournalConfig
from access_journal.errors import JournalClosedError, SnapshotClosedError
from access_journal.inception import InceptionTimestampLoader
from access_journal.storage.base import IndexedStore, IndexedStoreSnapshot
from access_journal.storage.decorator import InMemoryCacheDecoratorFactory
from access_journal.storage.serializers import FILE_SERIALIZER, LONG_SERIALIZER, canonical_path

logger = logging.getLogger(__name__)

CACHE_KEY = "journal-1"
FILE_ACCESS_CACHE_NAME = "file-access"

FileLike = Union[str, os.PathLike[str]]


class FileAccessTimeJournalSnapshot(Protocol):
    """Point-in-time, read-only view of a journal."""

    def get_last_access_time(self, file: FileLike) -> int:
        """Return the last access time of a file in milliseconds since the epoch."""
        ...

    def close(self) -> None:
        """Release the snapshot."""
        ...


class FileAccessTimeJournal(Protocol):
    """Records the last access time of files."""

    def set_last_access_time(self, file: FileLike, millis: int) -> None:
        ...

    def delete_last_access_time(self, file: FileLike) -> None:
        ...

    def create_snapshot(self) -> FileAccessTimeJournalSnapshot:
        ...


class DefaultFileAccessTimeJournal:
    """Journal stored in a persistent cache directory with on-demand locking.

    Attributes:
        cache: Persistent cache holding the journal's store and properties file
    """

    def __init__(
        self,
        config: JournalConfig,
        decorator_factory: Optional[InMemoryCacheDecoratorFactory] = None,
        clock: Clock = current_time_millis,
    ) -> None:
        """Open the journal described by config.

        Args:
            config: Journal location, lock and in-memory cache settings
            decorator_factory: Factory for the in-memory store decorator
            clock: Source of "now" for a newly created inception timestamp

        Raises:
            JournalIOError: If the store or properties file cannot be opened
            LockTimeoutError: If the lock cannot be acquired in time
        """
        decorator_factory = decorator_factory or InMemoryCacheDecoratorFactory()
        self.cache = PersistentCache(
            config.cache_dir,
            display_name=config.display_name,
            lock_mode=config.lock_mode,
            lock_timeout_ms=config.lock_timeout_ms,
            echo_sql=config.echo_sql,
        )
        try:
            self._store: IndexedStore[Path] = self.cache.create_indexed_store(
                FILE_ACCESS_CACHE_NAME,
                FILE_SERIALIZER,
                LONG_SERIALIZER,
                decorator=decorator_factory.decorator(
                    config.memory_cache_size, config.cross_process
                ),
            )
            self._inception = InceptionTimestampLoader(self.cache, clock)
            self._inception_timestamp = self._inception.get()
        except Exception:
            self.cache.close()
            raise
        logger.debug(f"Journal inception timestamp is {self._inception_timestamp}")

    @classmethod
    def open(
        cls,
        base_dir: Union[str, os.PathLike[str]],
        config: Optional[JournalConfig] = None,
        decorator_factory: Optional[InMemoryCacheDecoratorFactory] = None,
        clock: Clock = current_time_millis,
    ) -> "DefaultFileAccessTimeJournal":
        """Open (creating if absent) the journal under base_dir.

        Args:
            base_dir: Directory that will contain the journal's cache directory
            config: Optional settings; base_dir overrides its location
            decorator_factory: Factory for the in-memory store decorator
            clock: Source of "now" for a newly created inception timestamp

        Returns:
            The open journal
        """
        config = config or JournalConfig(cache_key=CACHE_KEY)
        config = config.model_copy(update={"base_dir": Path(base_dir)})
        return cls(config, decorator_factory=decorator_factory, clock=clock)

    @property
    def inception_timestamp(self) -> int:
        """Default last access time for files that were never recorded."""
        return self._inception_timestamp

    def set_last_access_time(self, file: FileLike, millis: int) -> None:
        """Record the last access time of a file, replacing any previous value.

        Args:
            file: File whose access is recorded
            millis: Access time in milliseconds since the epoch

        Raises:
            ValueError: If millis is not a signed 64-bit integer
            JournalClosedError: If the journal has been closed
            JournalIOError: If the store cannot be written
        """
        self._check_open()
        self._store.put(canonical_path(file), LONG_SERIALIZER.serialize(millis))

    def delete_last_access_time(self, file: FileLike) -> None:
        """Forget the last access time of a file. Does nothing if unknown.

        Args:
            file: File whose record is removed

        Raises:
            JournalClosedError: If the journal has been closed
            JournalIOError: If the store cannot be written
        """
        self._check_open()
        self._store.remove(canonical_path(file))

    def create_snapshot(self) -> "DefaultSnapshot":
        """Create a read-only view of the journal as of now.

        The snapshot is unaffected by later writes and must be closed by the
        caller. It stays usable after the journal itself is closed.

        Raises:
            JournalClosedError: If the journal has been closed
        """
        self._check_open()
        return DefaultSnapshot(self._store.create_snapshot(), self._inception_timestamp)

    def stop(self) -> None:
        """Write pending changes, then release the store and lock resources.

        Further calls do nothing.
        """
        self.cache.close()

    close = stop

    def __enter__(self) -> "DefaultFileAccessTimeJournal":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.stop()

    def _check_open(self) -> None:
        if self.cache.is_closed:
            raise JournalClosedError(self.cache.display_name)


class DefaultSnapshot:
    """Snapshot falling back to the inception timestamp for unknown files."""

    def __init__(self, snapshot: IndexedStoreSnapshot[Path], inception_timestamp: int) -> None:
        self._snapshot = snapshot
        self._inception_timestamp = inception_timestamp
        self._closed = False

    def get_last_access_time(self, file: FileLike) -> int:
        """Return the recorded access time of a file, or the inception timestamp.

        Raises:
            SnapshotClosedError: If the snapshot has been closed
        """
        if self._closed:
            raise SnapshotClosedError()
        recorded = self._snapshot.get(canonical_path(file))
        return self._inception_timestamp if recorded is None else recorded

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._snapshot.close()

    def __enter__(self) -> "DefaultSnapshot":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
