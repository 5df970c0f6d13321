"""Tests for JournalConfig."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from access_journal.config import JournalConfig
from access_journal.locking import LockMode


class TestJournalConfig:
    """Tests for JournalConfig defaults, validation and environment loading."""

    def test_defaults(self) -> None:
        """Defaults should lock on demand with a 1000 entry memory cache."""
        config = JournalConfig()
        assert config.cache_key == "journal-1"
        assert config.lock_mode == LockMode.NONE
        assert config.memory_cache_size == 1000
        assert config.cross_process is True

    def test_cache_dir_expands_user(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """cache_dir should expand '~' and append the cache key."""
        monkeypatch.setenv("HOME", str(tmp_path))
        config = JournalConfig(base_dir=Path("~/caches"))
        assert config.cache_dir == tmp_path / "caches" / "journal-1"

    def test_rejects_negative_sizes(self) -> None:
        """Negative capacities and timeouts should be rejected."""
        with pytest.raises(ValidationError):
            JournalConfig(memory_cache_size=-1)
        with pytest.raises(ValidationError):
            JournalConfig(lock_timeout_ms=-5)

    def test_from_env_uses_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without environment variables, from_env() should match the defaults."""
        for name in (
            "ACCESS_JOURNAL_BASE_DIR",
            "ACCESS_JOURNAL_CACHE_KEY",
            "ACCESS_JOURNAL_DISPLAY_NAME",
            "ACCESS_JOURNAL_LOCK_MODE",
            "ACCESS_JOURNAL_LOCK_TIMEOUT_MS",
            "ACCESS_JOURNAL_MEMORY_CACHE_SIZE",
            "ACCESS_JOURNAL_CROSS_PROCESS",
            "ACCESS_JOURNAL_ECHO_SQL",
        ):
            monkeypatch.delenv(name, raising=False)
        assert JournalConfig.from_env() == JournalConfig()

    def test_from_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Environment variables should override each setting."""
        monkeypatch.setenv("ACCESS_JOURNAL_BASE_DIR", str(tmp_path))
        monkeypatch.setenv("ACCESS_JOURNAL_CACHE_KEY", "journal-2")
        monkeypatch.setenv("ACCESS_JOURNAL_LOCK_MODE", "EXCLUSIVE")
        monkeypatch.setenv("ACCESS_JOURNAL_LOCK_TIMEOUT_MS", "250")
        monkeypatch.setenv("ACCESS_JOURNAL_MEMORY_CACHE_SIZE", "0")
        monkeypatch.setenv("ACCESS_JOURNAL_CROSS_PROCESS", "no")

        config = JournalConfig.from_env()

        assert config.base_dir == tmp_path
        assert config.cache_dir == tmp_path / "journal-2"
        assert config.lock_mode == LockMode.EXCLUSIVE
        assert config.lock_timeout_ms == 250
        assert config.memory_cache_size == 0
        assert config.cross_process is False
