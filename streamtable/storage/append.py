"""Storage that appends every written value to a file."""

from __future__ import annotations

from pathlib import Path

from streamtable.storage.base import Iterator, Storage
from streamtable.storage.null import NullIterator


class AppendFileStorage(Storage):
    """Write-only storage appending each value as a line to ``part-<n>``.

    Reads find nothing; the storage only records what was written.
    """

    def __init__(self, path: str | Path, partition: int) -> None:
        directory = Path(path)
        directory.mkdir(parents=True, exist_ok=True)
        self._file = open(directory / f"part-{partition}", "ab")
        self._recovered = False
        self.bytes_written = 0

    def open(self) -> None:
        """Flush pending writes; the file is opened on construction."""
        self._file.flush()

    def close(self) -> None:
        self._file.close()

    def has(self, key: str) -> bool:
        return False

    def get(self, key: str) -> bytes | None:
        return None

    def set(self, key: str, value: bytes) -> None:
        self.bytes_written += self._file.write(value)
        self._file.write(b"\n")

    def delete(self, key: str) -> None:
        pass

    def get_offset(self, default: int) -> int:
        return default

    def set_offset(self, offset: int) -> None:
        pass

    def mark_recovered(self) -> None:
        self._recovered = True

    def recovered(self) -> bool:
        return self._recovered

    def iterator(self) -> Iterator:
        return NullIterator()

    def iterator_with_range(self, start: bytes | None, limit: bytes | None) -> Iterator:
        return NullIterator()