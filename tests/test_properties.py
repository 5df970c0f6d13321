"""Tests for properties file parsing and writing."""

from pathlib import Path

import pytest

from access_journal.properties import load_properties, parse_properties, save_properties


class TestParseProperties:
    """Tests for parse_properties()."""

    def test_parses_key_value_pairs(self) -> None:
        """Both '=' and ':' should separate keys from values."""
        text = "inceptionTimestamp=1700000000000\nname : journal\n"
        assert parse_properties(text) == {
            "inceptionTimestamp": "1700000000000",
            "name": "journal",
        }

    def test_skips_comments_and_blank_lines(self) -> None:
        """Comment lines starting with '#' or '!' should be ignored."""
        text = "#Sat Nov 14 22:13:20 UTC 2023\n\n! note\nkey=value\n"
        assert parse_properties(text) == {"key": "value"}

    def test_line_without_separator_is_empty_value(self) -> None:
        """A bare key should map to an empty string."""
        assert parse_properties("lonely") == {"lonely": ""}

    def test_later_keys_override_earlier(self) -> None:
        """The last occurrence of a key should win."""
        assert parse_properties("a=1\na=2\n") == {"a": "2"}

    def test_value_may_contain_separators(self) -> None:
        """Only the first separator should split the line."""
        assert parse_properties("url=http://example.com/a=b") == {"url": "http://example.com/a=b"}


class TestSaveAndLoad:
    """Tests for save_properties() and load_properties()."""

    def test_save_then_load(self, tmp_path: Path) -> None:
        """Saved properties should load back with a leading comment line."""
        path = tmp_path / "nested" / "file.properties"
        save_properties({"inceptionTimestamp": "123"}, path)

        lines = path.read_text(encoding="iso-8859-1").splitlines()
        assert lines[0].startswith("#")
        assert lines[1] == "inceptionTimestamp=123"
        assert load_properties(path) == {"inceptionTimestamp": "123"}

    def test_save_replaces_existing_file(self, tmp_path: Path) -> None:
        """Saving should overwrite previous content and leave no temp files."""
        path = tmp_path / "file.properties"
        path.write_text("garbage without meaning\n")

        save_properties({"key": "value"}, path)

        assert load_properties(path) == {"key": "value"}
        assert [p.name for p in tmp_path.iterdir()] == ["file.properties"]

    def test_load_missing_file_raises(self, tmp_path: Path) -> None:
        """Loading a missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_properties(tmp_path / "missing.properties")

    def test_load_accepts_arbitrary_bytes(self, tmp_path: Path) -> None:
        """Non-UTF-8 content should load without decoding errors."""
        path = tmp_path / "file.properties"
        path.write_bytes(b"key=\xff\xfe\n")
        assert load_properties(path) == {"key": "\xff\xfe"}
