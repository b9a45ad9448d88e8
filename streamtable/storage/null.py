"""Storage that discards everything it is given."""

from __future__ import annotations

from streamtable.storage.base import Iterator, Storage


class NullIterator(Iterator):
    """Iterator that is exhausted from the start."""

    def next(self) -> bool:
        return False

    def key(self) -> bytes | None:
        return None

    def value(self) -> bytes | None:
        return None

    def release(self) -> None:
        pass

    def seek(self, key: bytes) -> bool:
        return False


class NullStorage(Storage):
    """Storage that keeps nothing; useful for debugging."""

    def __init__(self) -> None:
        self._recovered = False
        self.closed = False

    def open(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def has(self, key: str) -> bool:
        return False

    def get(self, key: str) -> bytes | None:
        return None

    def set(self, key: str, value: bytes) -> None:
        pass

    def delete(self, key: str) -> None:
        pass

    def get_offset(self, default: int) -> int:
        return default

    def set_offset(self, offset: int) -> None:
        pass

    def mark_recovered(self) -> None:
        pass

    def recovered(self) -> bool:
        return self._recovered

    def iterator(self) -> Iterator:
        return NullIterator()

    def iterator_with_range(self, start: bytes | None, limit: bytes | None) -> Iterator:
        return NullIterator()