"""Key and value serializers for indexed stores."""

import os
from pathlib import Path
from typing import Protocol, TypeVar, Union

T = TypeVar("T")
S = TypeVar("S")

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Serializer(Protocol[T, S]):
    """Converts between a domain value and its stored column form."""

    def serialize(self, value: T) -> S:
        ...

    def deserialize(self, stored: S) -> T:
        ...


def canonical_path(file: Union[str, os.PathLike[str]]) -> Path:
    """Return the canonical identity of a file: absolute and normalized.

    Symbolic links are not resolved, so a link and its target are tracked
    separately.
    """
    return Path(os.path.normpath(os.path.abspath(os.fspath(file))))


class FileSerializer:
    """Stores files as their canonical absolute path string."""

    def serialize(self, value: Union[str, os.PathLike[str]]) -> str:
        return str(canonical_path(value))

    def deserialize(self, stored: str) -> Path:
        return Path(stored)


class LongSerializer:
    """Stores signed 64-bit integers unchanged, rejecting anything else."""

    def serialize(self, value: int) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Expected an integer, got {type(value).__name__}")
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"Value {value} does not fit in a signed 64-bit integer")
        return value

    def deserialize(self, stored: int) -> int:
        return int(stored)


FILE_SERIALIZER = FileSerializer()
LONG_SERIALIZER = LongSerializer()
