"""Inception timestamp of a journal store.

The inception timestamp is the time a store was first opened. It is written
once to a properties file next to the store and reused verbatim afterwards,
including by later processes. Files that were never recorded are treated as
last accessed at this time, rather than as infinitely old.
"""

import logging
import re
import threading
from pathlib import Path
from typing import Optional

from access_journal.cache import PersistentCache
from access_journal.clock import Clock, current_time_millis
from access_journal.errors import JournalIOError
from access_journal.properties import load_properties, save_properties
from access_journal.storage.serializers import INT64_MAX, INT64_MIN

logger = logging.getLogger(__name__)

FILE_ACCESS_PROPERTIES_FILE_NAME = "file-access.properties"
INCEPTION_TIMESTAMP_KEY = "inceptionTimestamp"

_TIMESTAMP_PATTERN = re.compile(r"[+-]?[0-9]+")


class InceptionTimestampLoader:
    """Loads or creates the inception timestamp, exactly once per instance.

    The first call to get() runs the load-or-create sequence inside the
    cache's cross-process lock; concurrent callers in the same process wait
    for it and then share the cached value.
    """

    def __init__(self, cache: PersistentCache, clock: Clock = current_time_millis) -> None:
        self._cache = cache
        self._clock = clock
        self._lock = threading.Lock()
        self._value: Optional[int] = None

    @property
    def properties_file(self) -> Path:
        return self._cache.base_dir / FILE_ACCESS_PROPERTIES_FILE_NAME

    def get(self) -> int:
        """Return the inception timestamp, loading or creating it on first use.

        Raises:
            JournalIOError: If the properties file cannot be read or written
        """
        if self._value is None:
            with self._lock:
                if self._value is None:
                    self._value = self._cache.use_cache(self._load_or_persist)
        return self._value

    def _load_or_persist(self) -> int:
        properties_file = self.properties_file
        try:
            properties: Optional[dict[str, str]] = load_properties(properties_file)
        except FileNotFoundError:
            properties = None
        except OSError as e:
            raise JournalIOError("load_properties", str(properties_file), str(e)) from e

        if properties is not None:
            stored = properties.get(INCEPTION_TIMESTAMP_KEY)
            inception_timestamp = _parse_timestamp(stored)
            if inception_timestamp is not None:
                return inception_timestamp
            logger.warning(
                f"Ignoring unusable {INCEPTION_TIMESTAMP_KEY}={stored!r} in {properties_file}; "
                "creating a new inception timestamp"
            )

        inception_timestamp = self._clock()
        try:
            save_properties({INCEPTION_TIMESTAMP_KEY: str(inception_timestamp)}, properties_file)
        except OSError as e:
            raise JournalIOError("save_properties", str(properties_file), str(e)) from e
        logger.info(f"Created inception timestamp {inception_timestamp} in {properties_file}")
        return inception_timestamp


def _parse_timestamp(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if not _TIMESTAMP_PATTERN.fullmatch(value):
        return None
    timestamp = int(value)
    if not INT64_MIN <= timestamp <= INT64_MAX:
        return None
    return timestamp
