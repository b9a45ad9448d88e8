"""Append-only message queues standing in for topics during tests."""

from __future__ import annotations

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class Message:
    """A message stored in a queue at a fixed offset."""

    offset: int
    key: str
    value: bytes | None


class Queue:
    """Ordered, thread-safe list of messages of one topic.

    Offsets start at 0 and grow by one with every pushed message.
    """

    def __init__(self, topic: str) -> None:
        self.topic = topic
        self._lock = threading.Lock()
        self._messages: list[Message] = []
        self._hwm = 0

    def hwm(self) -> int:
        """Return the offset the next pushed message will get."""
        with self._lock:
            return self._hwm

    def push(self, key: str, value: bytes | None) -> int:
        """Append a message and return its offset."""
        with self._lock:
            offset = self._hwm
            self._messages.append(Message(offset, key, value))
            self._hwm += 1
            return offset

    def message(self, offset: int) -> Message:
        """Return the message stored at ``offset``."""
        with self._lock:
            return self._messages[offset]

    def messages_from_offset(self, offset: int) -> list[Message]:
        """Return all messages from ``offset`` on."""
        with self._lock:
            return self._messages[offset:]

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)