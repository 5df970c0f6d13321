"""SQLite-backed persistent indexed store.

Each store is a named slice of the ``indexed_entries`` table. Every operation
runs under the owning cache's cross-process lock; snapshots are read
transactions that pin the database state at the moment they are created.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generic, Iterator, Mapping, Optional, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from access_journal.errors import JournalIOError, SnapshotClosedError
from access_journal.locking import CrossProcessLock
from access_journal.storage.database import Database
from access_journal.storage.models import IndexedEntryModel
from access_journal.storage.serializers import Serializer

logger = logging.getLogger(__name__)

K = TypeVar("K")


@contextmanager
def translate_storage_errors(operation: str, location: str) -> Iterator[None]:
    """Re-raise database failures as JournalIOError."""
    try:
        yield
    except SQLAlchemyError as e:
        raise JournalIOError(operation, location, str(e)) from e


class SqliteIndexedStore(Generic[K]):
    """Persistent indexed store backed by a shared SQLite database.

    Attributes:
        name: Store name, used to partition entries in the table
    """

    def __init__(
        self,
        name: str,
        database: Database,
        lock: CrossProcessLock,
        key_serializer: Serializer[K, str],
        value_serializer: Serializer[int, int],
    ) -> None:
        """Initialize the store.

        Args:
            name: Store name
            database: Database holding the entries table
            lock: Cross-process lock of the owning cache
            key_serializer: Converts keys to their stored string form
            value_serializer: Validates and converts values
        """
        self.name = name
        self._database = database
        self._lock = lock
        self._key_serializer = key_serializer
        self._value_serializer = value_serializer
        self._location = str(database.config.path)

    def get(self, key: K) -> Optional[int]:
        """Retrieve the current value for a key.

        Args:
            key: Key to look up

        Returns:
            The stored value, or None if absent
        """
        stored_key = self._key_serializer.serialize(key)
        with self._lock.hold(), translate_storage_errors("get", self._location):
            with self._database.session() as session:
                stored = session.execute(self._select_value(stored_key)).scalar_one_or_none()
        return None if stored is None else self._value_serializer.deserialize(stored)

    def put(self, key: K, value: int) -> None:
        """Insert or replace the value for a key.

        Args:
            key: Key to write
            value: Value to store

        Raises:
            ValueError: If the value is rejected by the value serializer
            JournalIOError: If the database write fails
        """
        statement = self._upsert(key, value)
        with self._lock.hold(modifies=True), translate_storage_errors("put", self._location):
            with self._database.session() as session:
                session.execute(statement)

    def remove(self, key: K) -> None:
        """Remove the entry for a key; does nothing if absent.

        Args:
            key: Key to remove
        """
        statement = self._delete(key)
        with self._lock.hold(modifies=True), translate_storage_errors("remove", self._location):
            with self._database.session() as session:
                session.execute(statement)

    def write_all(self, changes: Mapping[K, Optional[int]]) -> None:
        """Apply several writes and removals in one transaction.

        Args:
            changes: Value to store per key, or None to remove the key

        Raises:
            ValueError: If a value is rejected by the value serializer
            JournalIOError: If the database write fails
        """
        statements = [
            self._delete(key) if value is None else self._upsert(key, value)
            for key, value in changes.items()
        ]
        if not statements:
            return
        with self._lock.hold(modifies=True), translate_storage_errors("write_all", self._location):
            with self._database.session() as session:
                for statement in statements:
                    session.execute(statement)
        logger.debug(f"Wrote {len(statements)} changes to store '{self.name}'")

    def flush(self) -> None:
        """Nothing to do; every write is committed when it is made."""

    def create_snapshot(self) -> "SqliteStoreSnapshot[K]":
        """Create an isolated view of the store's current state.

        The snapshot's read transaction is established while the lock is held,
        so it reflects every write committed before this call.

        Returns:
            Snapshot that must be closed by the caller
        """
        with self._lock.hold(), translate_storage_errors("create_snapshot", self._location):
            session = self._database.session_factory()
            try:
                # The first read fixes the transaction's view of the database
                session.execute(select(IndexedEntryModel.entry_key).limit(1)).first()
            except Exception:
                session.close()
                raise
        logger.debug(f"Created snapshot of store '{self.name}'")
        return SqliteStoreSnapshot(self, session)

    def _upsert(self, key: K, value: int) -> Any:
        stored_key = self._key_serializer.serialize(key)
        stored_value = self._value_serializer.serialize(value)
        return (
            insert(IndexedEntryModel)
            .values(store_name=self.name, entry_key=stored_key, entry_value=stored_value)
            .on_conflict_do_update(
                index_elements=[IndexedEntryModel.store_name, IndexedEntryModel.entry_key],
                set_={"entry_value": stored_value},
            )
        )

    def _delete(self, key: K) -> Any:
        return delete(IndexedEntryModel).where(
            IndexedEntryModel.store_name == self.name,
            IndexedEntryModel.entry_key == self._key_serializer.serialize(key),
        )

    def _select_value(self, stored_key: str) -> Any:
        return select(IndexedEntryModel.entry_value).where(
            IndexedEntryModel.store_name == self.name,
            IndexedEntryModel.entry_key == stored_key,
        )


class SqliteStoreSnapshot(Generic[K]):
    """Read-only view over a store, backed by an open read transaction."""

    def __init__(self, store: SqliteIndexedStore[K], session: Session) -> None:
        self._store = store
        self._session: Optional[Session] = session

    def get(self, key: K) -> Optional[int]:
        """Retrieve the value recorded for a key when the snapshot was taken.

        Args:
            key: Key to look up

        Returns:
            The recorded value, or None if the key had no entry

        Raises:
            SnapshotClosedError: If the snapshot has been closed
        """
        if self._session is None:
            raise SnapshotClosedError()
        stored_key = self._store._key_serializer.serialize(key)
        with translate_storage_errors("snapshot_get", self._store._location):
            stored = self._session.execute(
                self._store._select_value(stored_key)
            ).scalar_one_or_none()
        return None if stored is None else self._store._value_serializer.deserialize(stored)

    def close(self) -> None:
        """End the read transaction and return its connection."""
        session, self._session = self._session, None
        if session is None:
            return
        with translate_storage_errors("snapshot_close", self._store._location):
            try:
                session.rollback()
            finally:
                session.close()
