"""Tests for the cross-process lock."""

import threading
from pathlib import Path

import pytest

from access_journal.errors import JournalClosedError, JournalIOError, LockTimeoutError
from access_journal.locking import CrossProcessLock, LockMode


@pytest.fixture
def lock_file(tmp_path: Path) -> Path:
    """Path of a lock file inside a not-yet-created directory."""
    return tmp_path / "cache" / "cache.lock"


class TestOnDemandLocking:
    """Tests for LockMode.NONE."""

    def test_not_held_until_used(self, lock_file: Path) -> None:
        """The lock should only be taken inside hold()."""
        lock = CrossProcessLock(lock_file)
        assert not lock.is_held
        with lock.hold():
            assert lock.is_held
        assert not lock.is_held
        assert lock_file.exists()

    def test_hold_is_reentrant(self, lock_file: Path) -> None:
        """Nested hold() calls should keep the lock until the outermost exits."""
        lock = CrossProcessLock(lock_file)
        with lock.hold():
            with lock.hold(modifies=True):
                assert lock.is_held
            assert lock.is_held
        assert not lock.is_held

    def test_contended_lock_times_out(self, lock_file: Path) -> None:
        """A second lock on the same file should time out while the first is held."""
        first = CrossProcessLock(lock_file, display_name="test cache")
        second = CrossProcessLock(lock_file, display_name="test cache", timeout_ms=50)
        with first.hold():
            with pytest.raises(LockTimeoutError) as exc_info:
                with second.hold():
                    pass
        assert exc_info.value.error_code == "lock_timeout"
        assert "test cache" in exc_info.value.message

        with second.hold():
            assert second.is_held

    def test_waits_for_release(self, lock_file: Path) -> None:
        """A waiting holder should get the lock once it is released."""
        first = CrossProcessLock(lock_file)
        second = CrossProcessLock(lock_file, timeout_ms=5_000)
        acquired = threading.Event()
        release = threading.Event()

        def hold_first() -> None:
            with first.hold():
                acquired.set()
                release.wait(timeout=5)

        worker = threading.Thread(target=hold_first)
        worker.start()
        try:
            assert acquired.wait(timeout=5)
            timer = threading.Timer(0.1, release.set)
            timer.start()
            with second.hold():
                assert second.is_held
        finally:
            release.set()
            worker.join(timeout=5)

    def test_hold_after_close_raises(self, lock_file: Path) -> None:
        """hold() should fail once the lock is closed."""
        lock = CrossProcessLock(lock_file)
        lock.close()
        with pytest.raises(JournalClosedError):
            with lock.hold():
                pass


class TestExclusiveLocking:
    """Tests for LockMode.EXCLUSIVE."""

    def test_held_from_construction_until_close(self, lock_file: Path) -> None:
        """The lock should be held for the whole lifetime."""
        lock = CrossProcessLock(lock_file, mode=LockMode.EXCLUSIVE)
        assert lock.is_held
        with lock.hold():
            pass
        assert lock.is_held
        lock.close()
        assert not lock.is_held

    def test_blocks_other_holders(self, lock_file: Path) -> None:
        """Other locks on the file should time out while an exclusive lock is open."""
        owner = CrossProcessLock(lock_file, mode=LockMode.EXCLUSIVE)
        other = CrossProcessLock(lock_file, timeout_ms=30)
        try:
            with pytest.raises(LockTimeoutError):
                with other.hold():
                    pass
        finally:
            owner.close()


class TestModificationTracking:
    """Tests for detecting modifications made through another lock."""

    def test_foreign_modification_notifies_listeners(self, lock_file: Path) -> None:
        """Listeners should fire after another holder modified the cache."""
        observer = CrossProcessLock(lock_file)
        writer = CrossProcessLock(lock_file)
        notifications: list[str] = []
        observer.add_modification_listener(lambda: notifications.append("changed"))

        with observer.hold():
            pass
        with writer.hold(modifies=True):
            pass
        with observer.hold():
            pass

        assert notifications == ["changed"]

    def test_own_modifications_do_not_notify(self, lock_file: Path) -> None:
        """A holder's own writes should not be reported as foreign."""
        lock = CrossProcessLock(lock_file)
        notifications: list[str] = []
        lock.add_modification_listener(lambda: notifications.append("changed"))

        with lock.hold(modifies=True):
            pass
        with lock.hold(modifies=True):
            pass
        with lock.hold():
            pass

        assert notifications == []

    def test_read_only_holders_do_not_bump_generation(self, lock_file: Path) -> None:
        """Holding without modifying should leave the generation unchanged."""
        observer = CrossProcessLock(lock_file)
        reader = CrossProcessLock(lock_file)
        notifications: list[str] = []
        observer.add_modification_listener(lambda: notifications.append("changed"))

        with observer.hold():
            pass
        with reader.hold():
            pass
        with observer.hold():
            pass

        assert notifications == []

    def test_failed_block_is_not_a_modification(self, lock_file: Path) -> None:
        """An exception inside hold(modifies=True) should not bump the generation."""
        observer = CrossProcessLock(lock_file)
        writer = CrossProcessLock(lock_file)
        notifications: list[str] = []
        observer.add_modification_listener(lambda: notifications.append("changed"))

        with observer.hold():
            pass
        with pytest.raises(RuntimeError):
            with writer.hold(modifies=True):
                raise RuntimeError("write failed")
        with observer.hold():
            pass

        assert notifications == []


class TestGenerationFile:
    """Tests for reading and writing the generation stored in the lock file."""

    def test_unrecognized_content_is_rewritten(self, lock_file: Path) -> None:
        """A lock file with foreign content should be reset on the next modification."""
        lock_file.parent.mkdir(parents=True)
        lock_file.write_text("garbage")
        lock = CrossProcessLock(lock_file)

        with lock.hold(modifies=True):
            pass

        assert lock_file.read_text() == "1"

    def test_read_failure_releases_lock(
        self, lock_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A failure to read the generation should not leave the file locked."""
        lock = CrossProcessLock(lock_file)

        def failing_read(fd: int, length: int) -> bytes:
            raise OSError("read failed")

        with monkeypatch.context() as patched:
            patched.setattr("access_journal.locking.os.read", failing_read)
            with pytest.raises(JournalIOError):
                with lock.hold():
                    pass

        assert not lock.is_held
        other = CrossProcessLock(lock_file, timeout_ms=50)
        with other.hold():
            assert other.is_held
