"""Iterator merging several sorted iterators into one sorted sequence."""

from __future__ import annotations

import heapq
from collections.abc import Callable, Sequence

from streamtable.storage.base import Iterator


class MergeIterator(Iterator):
    """Iterate over sub-iterators in lexicographical key order.

    The order holds as long as each sub-iterator yields its keys in order.
    Sub-iterators are expected to be positioned on their first pair after
    seek().
    """

    def __init__(self, iterators: Sequence[Iterator] | None) -> None:
        self._iters: list[Iterator] = list(iterators or [])
        self._heap: list[tuple[bytes, int, Iterator]] = []
        self._key: bytes | None = None
        self._value: bytes | None = None
        self._build_heap(lambda it: it.next())

    def _build_heap(self, has_value: Callable[[Iterator], bool]) -> None:
        self._heap = []
        for index, it in enumerate(self._iters):
            if has_value(it):
                heapq.heappush(self._heap, (it.key() or b"", index, it))

    def key(self) -> bytes | None:
        return self._key

    def value(self) -> bytes | None:
        return self._value

    def seek(self, key: bytes) -> bool:
        self._build_heap(lambda it: it.seek(key))
        return bool(self._heap)

    def next(self) -> bool:
        if not self._heap:
            return False
        _, index, it = heapq.heappop(self._heap)
        key = it.key()
        self._key = None if key is None else bytes(key)
        value = it.value()
        self._value = None if value is None else bytes(value)
        if it.next():
            heapq.heappush(self._heap, (it.key() or b"", index, it))
        return True

    def release(self) -> None:
        """Release this iterator and every sub-iterator."""
        for it in self._iters:
            it.release()
        self._iters = []
        self._heap = []
        self._key = None
        self._value = None