"""In-memory storage."""

from __future__ import annotations

from streamtable.storage.base import OFFSET_KEY, Iterator, Storage


def _prefix_limit(prefix: bytes) -> bytes | None:
    """Smallest key greater than every key starting with ``prefix``.

    None means the range has no upper bound.
    """
    stripped = prefix.rstrip(b"\xff")
    if not stripped:
        return None
    return stripped[:-1] + bytes([stripped[-1] + 1])


class MemoryIterator(Iterator):
    """Iterator over a snapshot of keys of an in-memory storage."""

    def __init__(self, keys: list[str], data: dict[str, bytes]) -> None:
        self._current = -1
        self._keys = keys
        self._data = data

    def _exhausted(self) -> bool:
        return len(self._keys) <= self._current

    def next(self) -> bool:
        self._current += 1
        if self.key() == OFFSET_KEY.encode():
            self._current += 1
        return not self._exhausted()

    def key(self) -> bytes | None:
        if self._exhausted() or self._current < 0:
            return None
        return self._keys[self._current].encode()

    def value(self) -> bytes | None:
        if self._exhausted() or self._current < 0:
            return None
        return self._data.get(self._keys[self._current])

    def release(self) -> None:
        self._current = len(self._keys)

    def seek(self, key: bytes) -> bool:
        """Restrict the iterator to keys containing ``key`` and rewind it."""
        needle = key.decode() if key else ""
        self._data = {k: v for k, v in self._data.items() if needle in k}
        self._keys = sorted(self._data)
        self._current = -1
        return not self._exhausted()


class MemoryStorage(Storage):
    """Storage that keeps all pairs in a dictionary."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._offset: int | None = None
        self._recovered = False
        self.closed = False

    def open(self) -> None:
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def has(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        if value is None:
            raise ValueError("cannot write nil value")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def get_offset(self, default: int) -> int:
        return default if self._offset is None else self._offset

    def set_offset(self, offset: int) -> None:
        self._offset = offset

    def mark_recovered(self) -> None:
        pass

    def recovered(self) -> bool:
        return self._recovered

    def iterator(self) -> MemoryIterator:
        return MemoryIterator(sorted(self._data), self._data)

    def iterator_with_range(
        self, start: bytes | None, limit: bytes | None
    ) -> MemoryIterator:
        """Iterate over keys k with start <= k <= limit.

        Without a limit, every key having ``start`` as prefix is selected.
        """
        start = start or b""
        upper = limit if limit else _prefix_limit(start)
        keys = sorted(
            k
            for k in self._data
            if start <= k.encode() and (upper is None or k.encode() <= upper)
        )
        return MemoryIterator(keys, self._data)