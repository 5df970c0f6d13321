"""Bounded in-memory caching layer for indexed stores.

The decorator keeps recently used entries in a cachetools LRU cache in front
of a persistent store. Reads are served from memory when possible (including
remembered absence). Writes are held in memory and written behind: pending
changes reach the store in a single transaction when a snapshot is taken,
when the store is flushed or closed, and whenever as many changes are pending
as the LRU can hold. A write of the value already known for a key is dropped.

When the store is shared with other processes, the LRU is discarded every
time the cross-process lock reports a foreign modification. Pending writes
are kept, since they have not reached the store yet.
"""

import logging
import threading
from typing import Callable, Generic, Hashable, Mapping, Optional, TypeVar

import cachetools

from access_journal.locking import CrossProcessLock
from access_journal.storage.base import IndexedStore, IndexedStoreSnapshot

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)

StoreDecorator = Callable[[IndexedStore, CrossProcessLock], IndexedStore]

_ABSENT = object()


class InMemoryDecoratedStore(Generic[K]):
    """IndexedStore wrapper that caches entries in a bounded LRU.

    Attributes:
        _delegate: Persistent store being decorated
        _lock: Cross-process lock guarding the delegate
        _entries: LRU of key to value (or the absent marker)
        _pending: Changes not yet written to the delegate, in write order
        _stale: Set when another process modified the store
        _hit_count: Number of reads served from memory
        _miss_count: Number of reads that went to the delegate
    """

    def __init__(
        self,
        delegate: IndexedStore[K],
        lock: CrossProcessLock,
        max_entries: int,
        cross_process: bool,
    ) -> None:
        """Initialize the decorated store.

        Args:
            delegate: Persistent store to wrap
            lock: Cross-process lock of the owning cache
            max_entries: Maximum number of entries kept in memory, and of
                pending changes before they are flushed
            cross_process: Whether to drop cached entries on foreign writes
        """
        self._delegate = delegate
        self._lock = lock
        self._max_entries = max_entries
        self._entries: cachetools.LRUCache[K, object] = cachetools.LRUCache(maxsize=max_entries)
        self._pending: dict[K, object] = {}
        # Always taken before the cross-process lock
        self._mutex = threading.RLock()
        self._stale = False
        self._hit_count = 0
        self._miss_count = 0
        if cross_process:
            lock.add_modification_listener(self.invalidate)

    @property
    def size(self) -> int:
        """Number of entries currently held in memory."""
        return len(self._entries)

    @property
    def pending_count(self) -> int:
        """Number of changes not yet written to the delegate."""
        return len(self._pending)

    def get(self, key: K) -> Optional[int]:
        with self._mutex, self._lock.hold():
            self._discard_if_stale()
            cached = self._cached(key)
            if cached is not None:
                self._hit_count += 1
                return None if cached is _ABSENT else cached  # type: ignore[return-value]
            self._miss_count += 1
            value = self._delegate.get(key)
            self._entries[key] = _ABSENT if value is None else value
            return value

    def put(self, key: K, value: int) -> None:
        self._record(key, value)

    def remove(self, key: K) -> None:
        self._record(key, _ABSENT)

    def write_all(self, changes: Mapping[K, Optional[int]]) -> None:
        for key, value in changes.items():
            self._record(key, _ABSENT if value is None else value)

    def flush(self) -> None:
        """Write pending changes to the delegate in one transaction.

        Changes stay pending if the write fails.
        """
        with self._mutex:
            if not self._pending:
                return
            changes = {
                key: None if value is _ABSENT else value for key, value in self._pending.items()
            }
            self._delegate.write_all(changes)  # type: ignore[arg-type]
            self._pending.clear()
            logger.debug(f"Flushed {len(changes)} pending changes")

    def create_snapshot(self) -> IndexedStoreSnapshot[K]:
        with self._mutex, self._lock.hold():
            self.flush()
            return self._delegate.create_snapshot()

    def invalidate(self) -> None:
        """Discard every cached entry before the next access."""
        self._stale = True

    def get_stats(self) -> dict[str, int]:
        """Get cache statistics.

        Returns:
            Dictionary with hits, misses, current size and pending changes
        """
        return {
            "hits": self._hit_count,
            "misses": self._miss_count,
            "size": self.size,
            "pending": self.pending_count,
        }

    def _record(self, key: K, value: object) -> None:
        with self._mutex:
            self._discard_if_stale()
            if self._cached(key) == value:
                return
            self._pending[key] = value
            self._entries[key] = value
            if len(self._pending) >= self._max_entries:
                self.flush()

    def _cached(self, key: K) -> Optional[object]:
        if key in self._pending:
            return self._pending[key]
        return self._entries.get(key)

    def _discard_if_stale(self) -> None:
        if not self._stale:
            return
        self._stale = False
        if self._entries:
            logger.debug(f"Discarding {len(self._entries)} cached entries")
        self._entries.clear()
        # Pending changes are still the newest known values
        for key, value in self._pending.items():
            self._entries[key] = value


class InMemoryCacheDecoratorFactory:
    """Creates in-memory decorators for the stores of a persistent cache."""

    def decorator(self, max_entries: int, cross_process: bool) -> StoreDecorator:
        """Build a decorator with the given capacity.

        Args:
            max_entries: Maximum number of entries kept in memory; 0 disables caching
            cross_process: Whether other processes may write the same store

        Returns:
            Callable taking (store, lock) and returning the decorated store
        """

        def decorate(store: IndexedStore, lock: CrossProcessLock) -> IndexedStore:
            if max_entries == 0:
                return store
            return InMemoryDecoratedStore(store, lock, max_entries, cross_process)

        return decorate
