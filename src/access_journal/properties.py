"""Reading and writing simple ``key=value`` properties files.

The format is the line-oriented one used by Java properties files: blank
lines and lines starting with ``#`` or ``!`` are ignored, the first ``=`` or
``:`` separates key from value, and surrounding whitespace is dropped. Files
are read and written as ISO-8859-1, so any byte sequence can be loaded.
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

ENCODING = "iso-8859-1"


def parse_properties(text: str) -> dict[str, str]:
    """Parse properties text into a dictionary.

    Later occurrences of a key override earlier ones. A line without a
    separator is a key with an empty value.

    Args:
        text: Content of a properties file

    Returns:
        Mapping of keys to values
    """
    properties: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        positions = [pos for pos in (line.find("="), line.find(":")) if pos >= 0]
        if positions:
            split_at = min(positions)
            key, value = line[:split_at].strip(), line[split_at + 1 :].strip()
        else:
            key, value = line, ""
        properties[key] = value
    return properties


def load_properties(path: Path) -> dict[str, str]:
    """Load a properties file.

    Args:
        path: File to read

    Returns:
        Mapping of keys to values

    Raises:
        OSError: If the file cannot be read
    """
    return parse_properties(path.read_text(encoding=ENCODING))


def save_properties(properties: Mapping[str, str], path: Path) -> None:
    """Write a properties file atomically.

    Content goes to a temporary file in the same directory, which is then
    renamed over ``path``, so readers never see a partially written file.

    Args:
        properties: Keys and values to write
        path: Destination file

    Raises:
        OSError: If the file cannot be written
    """
    lines = [f"#{datetime.now(timezone.utc).strftime('%a %b %d %H:%M:%S UTC %Y')}"]
    lines.extend(f"{key}={value}" for key, value in properties.items())
    content = "\n".join(lines) + "\n"

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=ENCODING) as tmp_handle:
            tmp_handle.write(content)
            tmp_handle.flush()
            os.fsync(tmp_handle.fileno())
        os.replace(tmp_path, str(path))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
