"""Topic manager working on the in-memory queues of a tester."""

from __future__ import annotations

from typing import Any

from streamtable.topic_manager import TopicManagerError

OFFSET_NEWEST = -1
"""Time value asking for the offset of the next message to be written."""

OFFSET_OLDEST = -2
"""Time value asking for the oldest available offset."""

_SUPPORTED_PARTITIONS = (0,)


class MockTopicManager:
    """Topic manager supporting single-partition topics only.

    ``tester`` provides get_or_create_queue(topic).
    """

    def __init__(
        self,
        tester: Any,
        default_num_partitions: int = 1,
        default_replication_factor: int = 1,
    ) -> None:
        self._tester = tester
        self.default_num_partitions = default_num_partitions
        self.default_replication_factor = default_replication_factor
        self.closed = False

    def _ensure(self, topic: str, npar: int) -> None:
        if npar != 1:
            raise TopicManagerError("Mock only supports 1 partition")
        self._tester.get_or_create_queue(topic)

    def ensure_table_exists(self, topic: str, npar: int) -> None:
        self._ensure(topic, npar)

    def ensure_stream_exists(self, topic: str, npar: int) -> None:
        self._ensure(topic, npar)

    def ensure_topic_exists(
        self, topic: str, npar: int, rfactor: int, config: dict[str, str]
    ) -> None:
        self._ensure(topic, npar)

    def partitions(self, topic: str) -> list[int]:
        """Return the partitions of ``topic``; the mock knows only partition 0."""
        return list(_SUPPORTED_PARTITIONS)

    def get_offset(self, topic: str, partition: int, time: int) -> int:
        """Return the oldest or newest offset of ``topic``."""
        queue = self._tester.get_or_create_queue(topic)
        if time == OFFSET_OLDEST:
            return 0
        if time == OFFSET_NEWEST:
            return queue.hwm()
        raise TopicManagerError("only oldest and newest are supported in the mock")

    def close(self) -> None:
        self.closed = True