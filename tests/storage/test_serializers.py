"""Tests for key and value serializers."""

import os
from pathlib import Path

import pytest

from access_journal.storage.serializers import (
    FILE_SERIALIZER,
    LONG_SERIALIZER,
    canonical_path,
)


class TestCanonicalPath:
    """Tests for canonical_path()."""

    def test_normalizes_dots(self) -> None:
        """'.' and '..' components should be collapsed."""
        assert canonical_path("/a/./b/../c") == Path("/a/c")

    def test_makes_relative_paths_absolute(self) -> None:
        """Relative paths should be anchored at the working directory."""
        assert canonical_path("x") == Path(os.getcwd()) / "x"

    def test_does_not_resolve_symlinks(self, tmp_path: Path) -> None:
        """A symlink should keep its own identity."""
        target = tmp_path / "target"
        target.mkdir()
        link = tmp_path / "link"
        link.symlink_to(target)
        assert canonical_path(link) == link


class TestSerializers:
    """Tests for FILE_SERIALIZER and LONG_SERIALIZER."""

    def test_file_serializer(self) -> None:
        """Files should be stored as canonical path strings."""
        assert FILE_SERIALIZER.serialize("/a/b/../c") == "/a/c"
        assert FILE_SERIALIZER.deserialize("/a/c") == Path("/a/c")

    @pytest.mark.parametrize("value", [2**63, -(2**63) - 1])
    def test_long_serializer_rejects_out_of_range(self, value: int) -> None:
        """Values outside the signed 64-bit range should be rejected."""
        with pytest.raises(ValueError, match="64-bit"):
            LONG_SERIALIZER.serialize(value)

    @pytest.mark.parametrize("value", [True, 1.5, "12"])
    def test_long_serializer_rejects_non_integers(self, value: object) -> None:
        """Only genuine integers should be accepted."""
        with pytest.raises(ValueError, match="integer"):
            LONG_SERIALIZER.serialize(value)  # type: ignore[arg-type]
