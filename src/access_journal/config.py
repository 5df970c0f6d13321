"""Configuration model for the access time journal.

JournalConfig gathers everything needed to open a journal: where it lives,
how the cross-process lock behaves and how large the in-memory cache is.
It can be built directly or loaded from ACCESS_JOURNAL_* environment
variables.
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from access_journal.locking import LockMode

DEFAULT_BASE_DIR = Path("~/.cache/access-journal")


class JournalConfig(BaseModel):
    """Settings for opening a file access time journal.

    Attributes:
        base_dir: Directory under which the journal's cache directory is created
        cache_key: Versioned name of the cache directory inside base_dir
        display_name: Human-readable name used in logs and lock errors
        lock_mode: Whether the lock is taken per operation or held while open
        lock_timeout_ms: Maximum time to wait for the cross-process lock
        memory_cache_size: Capacity of the in-memory entry cache (0 disables it)
        cross_process: Whether the in-memory cache must notice other processes' writes
        echo_sql: Whether to log SQL statements issued against the store
    """

    model_config = ConfigDict(frozen=True)

    base_dir: Path = Field(
        default=DEFAULT_BASE_DIR,
        description="Directory under which the journal cache directory lives",
    )
    cache_key: str = Field(
        default="journal-1",
        min_length=1,
        description="Versioned name of the journal cache directory",
    )
    display_name: str = Field(
        default="journal cache",
        description="Human-readable name used in logs and errors",
    )
    lock_mode: LockMode = Field(
        default=LockMode.NONE,
        description="Cross-process lock mode; NONE locks on demand",
    )
    lock_timeout_ms: int = Field(
        default=60_000,
        ge=0,
        description="Maximum time to wait for the cross-process lock",
    )
    memory_cache_size: int = Field(
        default=1000,
        ge=0,
        description="Maximum number of entries kept in memory",
    )
    cross_process: bool = Field(
        default=True,
        description="Invalidate the in-memory cache when other processes write",
    )
    echo_sql: bool = Field(
        default=False,
        description="Log SQL statements issued against the store",
    )

    @property
    def cache_dir(self) -> Path:
        """Directory holding the store, lock file and properties file."""
        return self.base_dir.expanduser() / self.cache_key

    @classmethod
    def from_env(cls) -> "JournalConfig":
        """Load configuration from environment variables.

        Environment variables follow the pattern: ACCESS_JOURNAL_<SETTING_NAME>
        For example: ACCESS_JOURNAL_BASE_DIR, ACCESS_JOURNAL_LOCK_MODE

        Returns:
            JournalConfig instance with environment overrides
        """
        return cls(
            base_dir=Path(
                os.getenv("ACCESS_JOURNAL_BASE_DIR", str(cls.model_fields["base_dir"].default))
            ),
            cache_key=os.getenv(
                "ACCESS_JOURNAL_CACHE_KEY", cls.model_fields["cache_key"].default
            ),
            display_name=os.getenv(
                "ACCESS_JOURNAL_DISPLAY_NAME", cls.model_fields["display_name"].default
            ),
            lock_mode=LockMode(
                os.getenv(
                    "ACCESS_JOURNAL_LOCK_MODE", cls.model_fields["lock_mode"].default.value
                ).lower()
            ),
            lock_timeout_ms=int(
                os.getenv(
                    "ACCESS_JOURNAL_LOCK_TIMEOUT_MS",
                    cls.model_fields["lock_timeout_ms"].default,
                )
            ),
            memory_cache_size=int(
                os.getenv(
                    "ACCESS_JOURNAL_MEMORY_CACHE_SIZE",
                    cls.model_fields["memory_cache_size"].default,
                )
            ),
            cross_process=os.getenv(
                "ACCESS_JOURNAL_CROSS_PROCESS",
                str(cls.model_fields["cross_process"].default),
            ).lower()
            in ("true", "1", "yes"),
            echo_sql=os.getenv(
                "ACCESS_JOURNAL_ECHO_SQL",
                str(cls.model_fields["echo_sql"].default),
            ).lower()
            in ("true", "1", "yes"),
        )
