"""Storage kept in a Redis hash, one hash per topic partition."""

from __future__ import annotations

import re
from typing import Any

from streamtable.storage.base import OFFSET_KEY, Iterator, Storage
from streamtable.storage.builders import Builder

_OFFSET = OFFSET_KEY.encode()
_INT_RE = re.compile(r"[+-]?[0-9]+")


def _as_bytes(value: bytes | str) -> bytes:
    return value.encode() if isinstance(value, str) else bytes(value)


class RedisIterator(Iterator):
    """Iterator over the fields of a Redis hash, hiding the offset field.

    Values are fetched from Redis when they are read.
    """

    def __init__(self, keys: list[bytes], client: Any, hash_name: str) -> None:
        self._keys = keys
        self._client = client
        self._hash = hash_name
        self._current = -1

    def _exhausted(self) -> bool:
        return len(self._keys) <= self._current

    def next(self) -> bool:
        self._current += 1
        if self.key() == _OFFSET:
            self._current += 1
        return not self._exhausted()

    def key(self) -> bytes | None:
        if self._exhausted() or self._current < 0:
            return None
        return self._keys[self._current]

    def value(self) -> bytes | None:
        key = self.key()
        if key is None:
            return None
        data = self._client.hget(self._hash, key)
        return None if data is None else _as_bytes(data)

    def release(self) -> None:
        self._current = len(self._keys)

    def seek(self, key: bytes) -> bool:
        return not self._exhausted()


class RedisStorage(Storage):
    """Storage writing all pairs of a partition into the Redis hash ``hash_name``.

    ``client`` is a Redis client offering ping, hexists, hget, hset, hdel and
    hscan.
    """

    def __init__(self, client: Any, hash_name: str) -> None:
        if client is None:
            raise ValueError("invalid redis client")
        client.ping()
        self._client = client
        self._hash = hash_name

    @property
    def hash_name(self) -> str:
        """Name of the Redis hash holding this partition."""
        return self._hash

    def open(self) -> None:
        """Check that the Redis server is still reachable."""
        self._client.ping()

    def close(self) -> None:
        pass

    def has(self, key: str) -> bool:
        return bool(self._client.hexists(self._hash, key))

    def get(self, key: str) -> bytes | None:
        try:
            has = self._client.hexists(self._hash, key)
        except Exception as err:
            raise RuntimeError(
                f"error checking for existence in redis (key {key}): {err}"
            ) from err
        if not has:
            return None
        try:
            data = self._client.hget(self._hash, key)
        except Exception as err:
            raise RuntimeError(f"error getting from redis (key {key}): {err}") from err
        return None if data is None else _as_bytes(data)

    def set(self, key: str, value: bytes) -> None:
        try:
            self._client.hset(self._hash, key, value)
        except Exception as err:
            raise RuntimeError(f"error setting to redis (key {key}): {err}") from err

    def delete(self, key: str) -> None:
        self._client.hdel(self._hash, key)

    def get_offset(self, default: int) -> int:
        data = self.get(OFFSET_KEY)
        if data is None:
            return default
        text = data.decode(errors="replace")
        if not _INT_RE.fullmatch(text):
            raise ValueError(f"error decoding redis offset ({text}): invalid syntax")
        return int(text)

    def set_offset(self, offset: int) -> None:
        self.set(OFFSET_KEY, str(offset).encode())

    def mark_recovered(self) -> None:
        pass

    def recovered(self) -> bool:
        return False

    def _scan(self, match: str | None) -> RedisIterator:
        _, fields = self._client.hscan(self._hash, cursor=0, match=match)
        keys = [_as_bytes(k) for k in fields]
        return RedisIterator(keys, self._client, self._hash)

    def iterator(self) -> RedisIterator:
        return self._scan(None)

    def iterator_with_range(
        self, start: bytes | None, limit: bytes | None
    ) -> RedisIterator:
        """Iterate over the fields matching the pattern ``start``; ``limit`` is unused."""
        pattern = start.decode() if start else None
        return self._scan(pattern)


def redis_builder(client: Any, namespace: str) -> Builder:
    """Build Redis storages in hashes named ``<namespace>:<topic>:<partition>``."""

    def build(topic: str, partition: int) -> Storage:
        if not namespace:
            raise ValueError("missing namespace to redis storage")
        return RedisStorage(client, f"{namespace}:{topic}:{partition}")

    return build