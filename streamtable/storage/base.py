"""Interfaces for partition-local key-value storages and their iterators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Generator

OFFSET_KEY = "__offset"
"""Reserved key under which storages keep the partition offset."""


class Iterator(ABC):
    """Cursor over stored key-value pairs.

    A fresh iterator is positioned before the first pair, so next() has to be
    called before key() and value() return anything.
    """

    @abstractmethod
    def next(self) -> bool:
        """Move to the next pair and return whether such a pair exists."""

    @abstractmethod
    def key(self) -> bytes | None:
        """Return the current key, or None when there is no current pair."""

    @abstractmethod
    def value(self) -> bytes | None:
        """Return the current value, or None when there is no current pair."""

    @abstractmethod
    def release(self) -> None:
        """Release the iterator; it is not usable afterwards."""

    @abstractmethod
    def seek(self, key: bytes) -> bool:
        """Reposition the iterator at ``key`` and return whether pairs remain.

        next() must be called after seeking to reach the first pair.
        """

    def __iter__(self) -> Generator[tuple[bytes | None, bytes | None], None, None]:
        while self.next():
            yield self.key(), self.value()

    def __enter__(self) -> Iterator:
        return self

    def __exit__(self, *args) -> None:
        self.release()


class Storage(ABC):
    """Local persistent cache for one partition of a table.

    Implementations must allow any number of concurrent readers with a single
    writer.
    """

    @abstractmethod
    def open(self) -> None:
        """Open or initialise the storage."""

    @abstractmethod
    def close(self) -> None:
        """Close the storage."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return whether ``key`` exists."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the value for ``key`` or None if it does not exist."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` from the storage."""

    @abstractmethod
    def get_offset(self, default: int) -> int:
        """Return the stored offset, or ``default`` if none was stored."""

    @abstractmethod
    def set_offset(self, offset: int) -> None:
        """Store the local offset."""

    @abstractmethod
    def mark_recovered(self) -> None:
        """Mark the storage as recovered, ending the recovery phase."""

    @abstractmethod
    def recovered(self) -> bool:
        """Return whether the storage has been marked recovered."""

    @abstractmethod
    def iterator(self) -> Iterator:
        """Return an iterator over the whole storage."""

    @abstractmethod
    def iterator_with_range(self, start: bytes | None, limit: bytes | None) -> Iterator:
        """Return an iterator over the pairs between ``start`` and ``limit``.

        An empty or missing ``limit`` selects every key that has ``start`` as
        prefix.
        """