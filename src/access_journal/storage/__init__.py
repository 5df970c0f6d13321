"""Storage layer for the access time journal.

This module provides the persistent indexed store, its in-memory caching
decorator and the serializers used to key entries.
"""

from access_journal.storage.base import IndexedStore, IndexedStoreSnapshot
from access_journal.storage.decorator import InMemoryCacheDecoratorFactory, InMemoryDecoratedStore
from access_journal.storage.indexed_store import SqliteIndexedStore, SqliteStoreSnapshot
from access_journal.storage.serializers import FILE_SERIALIZER, LONG_SERIALIZER, canonical_path

__all__ = [
    "FILE_SERIALIZER",
    "LONG_SERIALIZER",
    "IndexedStore",
    "IndexedStoreSnapshot",
    "InMemoryCacheDecoratorFactory",
    "InMemoryDecoratedStore",
    "SqliteIndexedStore",
    "SqliteStoreSnapshot",
    "canonical_path",
]
