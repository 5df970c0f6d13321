"""Marks cache entries as accessed in a file access time journal."""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Union

from access_journal.clock import Clock, current_time_millis
from access_journal.journal import FileAccessTimeJournal
from access_journal.storage.serializers import canonical_path

logger = logging.getLogger(__name__)


class SingleDepthFileAccessTracker:
    """Records accesses for the entries found at a fixed depth below a root.

    A cache whose entries are directories two levels below its root (for
    example ``<root>/<hash>/<name>/...``) uses depth 2: an access to any file
    inside an entry is recorded against the entry directory itself.

    Attributes:
        base_dir: Root directory of the tracked cache
        depth: Number of path components below base_dir that identify an entry
    """

    def __init__(
        self,
        journal: FileAccessTimeJournal,
        base_dir: Union[str, os.PathLike[str]],
        depth: int,
        clock: Clock = current_time_millis,
    ) -> None:
        if depth < 1:
            raise ValueError(f"depth must be at least 1, got {depth}")
        self.base_dir = canonical_path(base_dir)
        self.depth = depth
        self._journal = journal
        self._clock = clock

    def mark_accessed(self, files: Iterable[Union[str, os.PathLike[str]]]) -> int:
        """Record "now" as the last access time of the entries containing files.

        Files outside base_dir, or less than depth levels below it, are ignored.

        Args:
            files: Files that were used

        Returns:
            Number of distinct entries recorded
        """
        entries: dict[Path, None] = {}
        for file in files:
            entry = self._entry_for(canonical_path(file))
            if entry is not None:
                entries[entry] = None
        if not entries:
            return 0

        now = self._clock()
        for entry in entries:
            self._journal.set_last_access_time(entry, now)
        logger.debug(f"Marked {len(entries)} entries under {self.base_dir} as accessed at {now}")
        return len(entries)

    def _entry_for(self, file: Path) -> Optional[Path]:
        try:
            relative = file.relative_to(self.base_dir)
        except ValueError:
            return None
        if len(relative.parts) < self.depth:
            return None
        return self.base_dir.joinpath(*relative.parts[: self.depth])
