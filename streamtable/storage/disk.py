"""Persistent on-disk storage backed by an ordered key-value table."""

from __future__ import annotations

import re
import sqlite3
import threading
from bisect import bisect_left
from pathlib import Path

from streamtable.storage.base import OFFSET_KEY, Iterator, Storage
from streamtable.storage.memory import _prefix_limit

_OFFSET = OFFSET_KEY.encode()
_DB_FILE = "data.sqlite"
_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key BLOB PRIMARY KEY, value BLOB NOT NULL)"
_INT_RE = re.compile(r"[+-]?[0-9]+")


class DiskIterator(Iterator):
    """Iterator over a snapshot of key-ordered pairs, hiding the offset key.

    seek() positions the iterator on the first pair whose key is greater than
    or equal to the given key.
    """

    def __init__(self, pairs: list[tuple[bytes, bytes]]) -> None:
        self._pairs = pairs
        self._keys = [key for key, _ in pairs]
        self._pos = -1

    def _valid(self) -> bool:
        return 0 <= self._pos < len(self._pairs)

    def _skip_offset(self) -> None:
        if self._valid() and self._pairs[self._pos][0] == _OFFSET:
            self._pos += 1

    def next(self) -> bool:
        if self._pos < len(self._pairs):
            self._pos += 1
        self._skip_offset()
        return self._valid()

    def key(self) -> bytes | None:
        return self._pairs[self._pos][0] if self._valid() else None

    def value(self) -> bytes | None:
        return self._pairs[self._pos][1] if self._valid() else None

    def release(self) -> None:
        self._pairs = []
        self._keys = []
        self._pos = 0

    def seek(self, key: bytes) -> bool:
        self._pos = bisect_left(self._keys, key or b"")
        self._skip_offset()
        return self._valid()


class DiskStorage(Storage):
    """Storage kept in a database file inside the directory ``path``.

    Until mark_recovered() is called, all writes are collected in one
    transaction, which is committed on recovery or on close.
    """

    def __init__(self, path: str | Path) -> None:
        directory = Path(path)
        directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(
            str(directory / _DB_FILE), isolation_level=None, check_same_thread=False
        )
        self._conn.execute(_SCHEMA)
        self._conn.execute("BEGIN")
        self._recovered = False

    def open(self) -> None:
        """Make sure the table exists; the database is opened on construction."""
        with self._lock:
            self._conn.execute(_SCHEMA)

    def close(self) -> None:
        with self._lock:
            if not self._recovered:
                self._conn.execute("COMMIT")
            self._conn.close()

    def has(self, key: str) -> bool:
        with self._lock:
            row = self._conn.execute(
                "SELECT 1 FROM kv WHERE key = ?", (key.encode(),)
            ).fetchone()
        return row is not None

    def get(self, key: str) -> bytes | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key.encode(),)
            ).fetchone()
        return None if row is None else bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        data = b"" if value is None else bytes(value)
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (key.encode(), data),
            )

    def delete(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE key = ?", (key.encode(),))

    def get_offset(self, default: int) -> int:
        data = self.get(OFFSET_KEY)
        if data is None:
            return default
        text = data.decode(errors="replace")
        if not _INT_RE.fullmatch(text):
            raise ValueError(f"error decoding offset: invalid syntax {text!r}")
        return int(text)

    def set_offset(self, offset: int) -> None:
        self.set(OFFSET_KEY, str(offset).encode())

    def mark_recovered(self) -> None:
        with self._lock:
            if self._recovered:
                return
            self._recovered = True
            self._conn.execute("COMMIT")

    def recovered(self) -> bool:
        return self._recovered

    def _snapshot(self, where: str, params: tuple) -> DiskIterator:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT key, value FROM kv {where} ORDER BY key", params
            ).fetchall()
        return DiskIterator([(bytes(k), bytes(v)) for k, v in rows])

    def iterator(self) -> DiskIterator:
        return self._snapshot("", ())

    def iterator_with_range(
        self, start: bytes | None, limit: bytes | None
    ) -> DiskIterator:
        """Iterate over the half-open range [start, limit).

        Without a limit, every key having ``start`` as prefix is selected.
        """
        start = start or b""
        upper = limit if limit else _prefix_limit(start)
        if upper is None:
            return self._snapshot("WHERE key >= ?", (start,))
        return self._snapshot("WHERE key >= ? AND key < ?", (start, upper))