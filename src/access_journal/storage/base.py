"""Abstract store interfaces for the storage layer.

This module defines Protocol classes for persistent indexed stores and their
snapshots, so decorators and the journal can work against any implementation
with the same interface.
"""

from typing import Mapping, Optional, Protocol, TypeVar

K = TypeVar("K")
K_contra = TypeVar("K_contra", contravariant=True)


class IndexedStoreSnapshot(Protocol[K_contra]):
    """Protocol for an isolated, read-only view of an indexed store."""

    def get(self, key: K_contra) -> Optional[int]:
        """Retrieve the value recorded for a key when the snapshot was taken.

        Args:
            key: Key to look up

        Returns:
            The recorded value, or None if the key had no entry
        """
        ...

    def close(self) -> None:
        """Release the resources held by the snapshot."""
        ...


class IndexedStore(Protocol[K]):
    """Protocol for persistent keyed storage of 64-bit values.

    This protocol defines the interface that all store implementations and
    decorators must follow.
    """

    def get(self, key: K) -> Optional[int]:
        """Retrieve the current value for a key.

        Args:
            key: Key to look up

        Returns:
            The stored value, or None if absent
        """
        ...

    def put(self, key: K, value: int) -> None:
        """Insert or replace the value for a key.

        Args:
            key: Key to write
            value: Value to store
        """
        ...

    def remove(self, key: K) -> None:
        """Remove the entry for a key; does nothing if absent.

        Args:
            key: Key to remove
        """
        ...

    def write_all(self, changes: Mapping[K, Optional[int]]) -> None:
        """Apply several writes and removals as one transaction.

        Args:
            changes: Value to store per key, or None to remove the key
        """
        ...

    def flush(self) -> None:
        """Persist any writes that are still held in memory."""
        ...

    def create_snapshot(self) -> IndexedStoreSnapshot[K]:
        """Create an isolated view of the store's current state.

        Returns:
            Snapshot that must be closed by the caller
        """
        ...
