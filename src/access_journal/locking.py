"""Cross-process advisory locking for persistent caches.

This module provides a lock-file based lock manager with two modes:
- LockMode.NONE: no lock is held while the cache is open; every operation
  acquires the lock on demand and releases it when done
- LockMode.EXCLUSIVE: the lock is acquired on open and held until close

The lock file also carries a modification generation. Whenever a holder that
modified the cache releases the lock, the generation is incremented. A process
that later acquires the lock and sees a generation it did not write knows
another process changed the cache, and notifies its listeners so in-memory
state can be discarded.
"""

import fcntl
import logging
import os
import threading
import time
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from access_journal.errors import JournalClosedError, JournalIOError, LockTimeoutError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.01


class LockMode(str, Enum):
    """How long the cross-process lock is held."""

    NONE = "none"
    EXCLUSIVE = "exclusive"


class CrossProcessLock:
    """Reentrant cross-process lock backed by ``fcntl.flock`` on a lock file.

    Within one process, holders are serialized by a reentrant thread lock, so
    nested ``hold()`` calls from the same thread are cheap and only the
    outermost one touches the lock file.

    Attributes:
        lock_file: Path of the lock file
        mode: Lock mode selected at construction
        display_name: Human-readable name used in errors and logs
        timeout_ms: Maximum time to wait for the file lock
    """

    def __init__(
        self,
        lock_file: Path,
        mode: LockMode = LockMode.NONE,
        display_name: str = "cache",
        timeout_ms: int = 60_000,
    ) -> None:
        self.lock_file = lock_file
        self.mode = mode
        self.display_name = display_name
        self.timeout_ms = timeout_ms
        self._thread_lock = threading.RLock()
        self._depth = 0
        self._handle: Optional[int] = None
        self._dirty = False
        self._seen_generation: Optional[int] = None
        self._listeners: list[Callable[[], None]] = []
        self._closed = False

        if mode == LockMode.EXCLUSIVE:
            with self._thread_lock:
                self._acquire_file_lock()
                self._depth = 1

    @property
    def is_held(self) -> bool:
        """Whether the file lock is currently held by this process."""
        return self._handle is not None

    def add_modification_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback fired when another process modified the cache.

        Args:
            listener: Zero-argument callable, invoked while the lock is held
        """
        self._listeners.append(listener)

    @contextmanager
    def hold(self, modifies: bool = False) -> Iterator[None]:
        """Hold the lock for the duration of the block.

        Args:
            modifies: Whether the block changes the cache contents

        Raises:
            JournalClosedError: If the lock has been closed
            LockTimeoutError: If the file lock could not be acquired in time
            JournalIOError: If the lock file cannot be opened or written
        """
        with self._thread_lock:
            if self._closed:
                raise JournalClosedError(self.display_name)
            if self._depth == 0:
                self._acquire_file_lock()
            self._depth += 1
            try:
                yield
                if modifies:
                    self._dirty = True
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._release_file_lock()

    def close(self) -> None:
        """Release the lock if held for the cache's lifetime, and close."""
        with self._thread_lock:
            if self._closed:
                return
            if self.mode == LockMode.EXCLUSIVE and self._depth > 0:
                self._depth = 0
                self._release_file_lock()
            self._closed = True

    def _acquire_file_lock(self) -> None:
        try:
            self.lock_file.parent.mkdir(parents=True, exist_ok=True)
            handle = os.open(self.lock_file, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError as e:
            raise JournalIOError("lock", str(self.lock_file), str(e)) from e

        deadline = time.monotonic() + self.timeout_ms / 1000
        while True:
            try:
                fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    os.close(handle)
                    raise LockTimeoutError(
                        str(self.lock_file), self.display_name, self.timeout_ms
                    ) from None
                time.sleep(_POLL_INTERVAL_SECONDS)
            except OSError as e:
                os.close(handle)
                raise JournalIOError("lock", str(self.lock_file), str(e)) from e

        try:
            generation = self._read_generation(handle)
        except JournalIOError:
            fcntl.flock(handle, fcntl.LOCK_UN)
            os.close(handle)
            raise
        self._handle = handle
        logger.debug(f"Acquired lock on {self.display_name} ({self.lock_file})")

        if self._seen_generation is not None and generation != self._seen_generation:
            logger.debug(
                f"{self.display_name} was modified by another process "
                f"(generation {self._seen_generation} -> {generation})"
            )
            for listener in self._listeners:
                listener()
        self._seen_generation = generation

    def _release_file_lock(self) -> None:
        handle = self._handle
        if handle is None:
            return
        try:
            if self._dirty:
                generation = (self._seen_generation or 0) + 1
                self._write_generation(handle, generation)
                self._seen_generation = generation
                self._dirty = False
        finally:
            self._handle = None
            fcntl.flock(handle, fcntl.LOCK_UN)
            os.close(handle)
            logger.debug(f"Released lock on {self.display_name} ({self.lock_file})")

    def _read_generation(self, handle: int) -> int:
        try:
            os.lseek(handle, 0, os.SEEK_SET)
            content = os.read(handle, 64)
        except OSError as e:
            raise JournalIOError("lock", str(self.lock_file), str(e)) from e
        try:
            return int(content.decode("ascii").strip() or 0)
        except (UnicodeDecodeError, ValueError):
            # An unrecognized lock file is treated as a fresh one
            return 0

    def _write_generation(self, handle: int, generation: int) -> None:
        try:
            os.ftruncate(handle, 0)
            os.lseek(handle, 0, os.SEEK_SET)
            os.write(handle, str(generation).encode("ascii"))
        except OSError as e:
            raise JournalIOError("lock", str(self.lock_file), str(e)) from e
