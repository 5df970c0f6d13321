"""Persistent cache directory with cross-process locking.

A PersistentCache owns one directory on disk: the lock file that coordinates
processes, the SQLite database holding its indexed stores, and any side files
callers keep next to them. Work that must not interleave with other processes
runs through use_cache().
"""

import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

from access_journal.errors import JournalClosedError, JournalIOError
from access_journal.locking import CrossProcessLock, LockMode
from access_journal.storage.base import IndexedStore
from access_journal.storage.database import Database, DatabaseConfig
from access_journal.storage.decorator import StoreDecorator
from access_journal.storage.indexed_store import SqliteIndexedStore, translate_storage_errors
from access_journal.storage.serializers import Serializer

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATABASE_FILE_NAME = "journal.db"


class PersistentCache:
    """A locked directory of persistent indexed stores.

    Attributes:
        display_name: Human-readable name used in logs and errors
        lock: Cross-process lock guarding the directory
        database: Database holding the directory's indexed stores
    """

    def __init__(
        self,
        base_dir: Path,
        display_name: str = "cache",
        lock_mode: LockMode = LockMode.NONE,
        lock_timeout_ms: int = 60_000,
        echo_sql: bool = False,
    ) -> None:
        """Open (creating if needed) the cache directory.

        Args:
            base_dir: Cache directory
            display_name: Human-readable name used in logs and errors
            lock_mode: NONE to lock per operation, EXCLUSIVE to lock until close
            lock_timeout_ms: Maximum time to wait for the lock
            echo_sql: Whether to log SQL statements

        Raises:
            JournalIOError: If the directory or database cannot be created
            LockTimeoutError: If the lock cannot be acquired in time
        """
        self.display_name = display_name
        self._base_dir = base_dir
        self._closed = False
        self._stores: list[IndexedStore] = []

        try:
            base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise JournalIOError("open", str(base_dir), str(e)) from e

        self.lock = CrossProcessLock(
            base_dir / f"{base_dir.name}.lock",
            mode=lock_mode,
            display_name=display_name,
            timeout_ms=lock_timeout_ms,
        )
        self.database = Database(
            DatabaseConfig(
                path=base_dir / DATABASE_FILE_NAME,
                echo=echo_sql,
                busy_timeout_ms=lock_timeout_ms,
            )
        )
        try:
            with self.lock.hold(), translate_storage_errors("open", str(base_dir)):
                self.database.create_tables()
        except Exception:
            self.database.close()
            self.lock.close()
            raise

        logger.info(f"Opened {display_name} at {base_dir} (lock mode: {lock_mode.value})")

    @property
    def base_dir(self) -> Path:
        """Directory of this cache."""
        return self._base_dir

    @property
    def is_closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def use_cache(self, factory: Callable[[], T]) -> T:
        """Run factory while holding the cache's cross-process lock.

        Args:
            factory: Work to perform with exclusive access

        Returns:
            Whatever factory returns

        Raises:
            JournalClosedError: If the cache has been closed
        """
        self._check_open()
        with self.lock.hold():
            return factory()

    def create_indexed_store(
        self,
        name: str,
        key_serializer: Serializer,
        value_serializer: Serializer,
        decorator: Optional[StoreDecorator] = None,
    ) -> IndexedStore:
        """Create a named store inside this cache.

        Args:
            name: Store name
            key_serializer: Converts keys to their stored string form
            value_serializer: Validates and converts values
            decorator: Optional wrapper applied to the store, such as an in-memory cache

        Returns:
            The (possibly decorated) store
        """
        self._check_open()
        store: IndexedStore = SqliteIndexedStore(
            name, self.database, self.lock, key_serializer, value_serializer
        )
        if decorator is not None:
            store = decorator(store, self.lock)
        self._stores.append(store)
        return store

    def close(self) -> None:
        """Flush the stores, then release the database and the lock.

        Further calls do nothing. The database and lock are released even
        when a flush fails; the failure is then raised.
        """
        if self._closed:
            return
        self._closed = True
        try:
            for store in self._stores:
                store.flush()
        finally:
            try:
                self.database.close()
            finally:
                self.lock.close()
        logger.info(f"Closed {self.display_name} at {self._base_dir}")

    def _check_open(self) -> None:
        if self._closed:
            raise JournalClosedError(self.display_name)
