"""In-memory stand-in for a message broker and table storages, for tests."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from streamtable.storage.base import Storage
from streamtable.storage.builders import Builder
from streamtable.storage.memory import MemoryStorage
from streamtable.tester.queue import Queue
from streamtable.tester.topic_manager import MockTopicManager


class Codec(ABC):
    """Converts values to bytes and back."""

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Return the encoded form of ``value``."""

    @abstractmethod
    def decode(self, data: bytes | None) -> Any:
        """Return the value encoded in ``data``."""


class QueueTracker:
    """Reads the messages of one topic that arrived after it was created."""

    def __init__(self, tester: Tester, topic: str) -> None:
        self._tester = tester
        self._topic = topic
        self._next_offset = tester.get_or_create_queue(topic).hwm()

    def next(self) -> tuple[str, Any] | None:
        """Return the next (key, decoded value), or None if there is none."""
        raw = self.next_raw()
        if raw is None:
            return None
        key, data = raw
        return key, self._tester.codec_for_topic(self._topic).decode(data)

    def next_raw(self) -> tuple[str, bytes | None] | None:
        """Return the next (key, raw value), or None if there is none."""
        queue = self._tester.get_or_create_queue(self._topic)
        if self._next_offset >= len(queue):
            return None
        msg = queue.message(self._next_offset)
        self._next_offset += 1
        return msg.key, msg.value

    def seek(self, offset: int) -> None:
        """Move the tracker to ``offset``."""
        self._next_offset = offset

    def hwm(self) -> int:
        """Return the high water mark of the tracked topic."""
        return self._tester.get_or_create_queue(self._topic).hwm()

    def next_offset(self) -> int:
        """Return the offset the tracker reads next."""
        return self._next_offset


class Tester:
    """Keeps topics as in-memory queues and tables as in-memory storages."""

    def __init__(self) -> None:
        self._codecs_lock = threading.RLock()
        self._codecs: dict[str, Codec] = {}
        self._queues_lock = threading.Lock()
        self._queues: dict[str, Queue] = {}
        self._storages_lock = threading.Lock()
        self._storages: dict[str, Storage] = {}
        self._tmgr = MockTopicManager(self, 1, 1)

    def get_or_create_queue(self, topic: str) -> Queue:
        """Return the queue of ``topic``, creating it if necessary."""
        with self._queues_lock:
            queue = self._queues.get(topic)
            if queue is None:
                queue = Queue(topic)
                self._queues[topic] = queue
            return queue

    def register_codec(self, topic: str, codec: Codec) -> None:
        """Associate ``codec`` with ``topic``.

        Registering a codec of a different type for the same topic fails.
        """
        with self._codecs_lock:
            self.get_or_create_queue(topic)
            existing = self._codecs.get(topic)
            if existing is not None and type(existing) is not type(codec):
                raise ValueError(
                    "There are different codecs for the same topic. "
                    f"This is messed up ({codec!r}, {existing!r})"
                )
            self._codecs[topic] = codec

    def register_emitter(self, topic: str, codec: Codec) -> None:
        """Register the codec used by an emitter for ``topic``."""
        self.register_codec(topic, codec)

    def codec_for_topic(self, topic: str) -> Codec:
        with self._codecs_lock:
            try:
                return self._codecs[topic]
            except KeyError:
                raise KeyError(f"no codec for topic {topic} registered") from None

    def emit(self, topic: str, key: str, value: bytes | None) -> int:
        """Append raw ``value`` to ``topic`` and return its offset."""
        return self.get_or_create_queue(topic).push(key, value)

    def consume(self, topic: str, key: str, msg: Any) -> int:
        """Encode ``msg`` with the topic's codec and push it; None is pushed as is."""
        if msg is None:
            return self.emit(topic, key, None)
        try:
            data = self.codec_for_topic(topic).encode(msg)
        except KeyError:
            raise
        except Exception as err:
            raise ValueError(f"Error encoding value {msg!r}: {err}") from err
        return self.emit(topic, key, data)

    def _get_or_create_storage(self, table: str) -> Storage:
        with self._storages_lock:
            storage = self._storages.get(table)
            if storage is None:
                storage = MemoryStorage()
                self._storages[table] = storage
            return storage

    def table_value(self, table: str, key: str) -> Any:
        """Return the decoded value of ``key`` in ``table``, or None if missing."""
        with self._storages_lock:
            storage = self._storages.get(table)
        if storage is None:
            raise KeyError(f"topic {table} does not exist")
        item = storage.get(key)
        if item is None:
            return None
        return self.codec_for_topic(table).decode(item)

    def set_table_value(self, table: str, key: str, value: Any) -> None:
        """Encode ``value`` and store it directly in the storage of ``table``."""
        storage = self._get_or_create_storage(table)
        data = self.codec_for_topic(table).encode(value)
        storage.set(key, data)

    def clear_values(self) -> None:
        """Remove every value from every storage."""
        with self._storages_lock:
            storages = list(self._storages.values())
        for storage in storages:
            with storage.iterator() as it:
                keys = [key for key, _ in it]
            for key in keys:
                storage.delete(key.decode())

    def storage_builder(self) -> Builder:
        """Return a builder handing out one shared in-memory storage per topic."""

        def build(topic: str, partition: int) -> Storage:
            return self._get_or_create_storage(topic)

        return build

    def topic_manager_builder(self) -> Callable[[Sequence[str]], MockTopicManager]:
        """Return a builder handing out this tester's topic manager."""

        def build(brokers: Sequence[str]) -> MockTopicManager:
            return self._tmgr

        return build

    def new_queue_tracker(self, topic: str) -> QueueTracker:
        return QueueTracker(self, topic)