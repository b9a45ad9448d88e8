"""Checking and creating topics and their partitions on a cluster."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

CREATE_TOPICS_TIMEOUT = 15.0
"""Seconds the broker may take to create a topic."""


class TopicManagerError(Exception):
    """Raised when a topic cannot be checked or created."""


class UnknownTopicOrPartitionError(Exception):
    """Raised by a client when the requested topic or partition does not exist."""


@dataclass
class TopicManagerConfig:
    """Replication and retention used when tables and streams are created."""

    table_replication: int = 2
    stream_replication: int = 2
    stream_retention: timedelta = field(default_factory=lambda: timedelta(hours=1))


def check_broker(broker: Any, config: Any) -> None:
    """Open a connection to ``broker`` and make sure it is connected."""
    try:
        broker.open(config)
    except Exception as err:
        raise TopicManagerError(f"error opening broker connection: {err}") from err
    try:
        connected = broker.connected()
    except Exception as err:
        raise TopicManagerError(
            f"cannot connect to broker {broker.addr()}: {err}"
        ) from err
    if not connected:
        raise TopicManagerError(f"cannot connect to broker {broker.addr()}: not connected")


class TopicManager:
    """Checks that topics exist with the right partitions, creating them if missing.

    ``client`` offers brokers(), partitions(topic), get_offset(topic, partition,
    time) and close(); the first of its brokers is checked with ``check`` and
    used to create topics through create_topics(request).
    """

    def __init__(
        self,
        brokers: Sequence[str],
        client: Any,
        config: TopicManagerConfig | None,
        client_config: Any = None,
        check: Callable[[Any, Any], None] = check_broker,
    ) -> None:
        if client is None:
            raise TopicManagerError("cannot create topic manager with nil client")
        if config is None:
            raise TopicManagerError("cannot create topic manager with nil config")
        active = list(client.brokers())
        if not active:
            raise TopicManagerError("no brokers active in current client")
        broker = active[0]
        check(broker, client_config)
        self.brokers = list(brokers)
        self.client = client
        self.broker = broker
        self.config = config

    def close(self) -> None:
        self.client.close()

    def partitions(self, topic: str) -> list[int]:
        return list(self.client.partitions(topic))

    def get_offset(self, topic: str, partition: int, time: int) -> int:
        return self.client.get_offset(topic, partition, time)

    def _exists_with_partitions(self, topic: str, npar: int) -> bool:
        try:
            partitions = self.client.partitions(topic)
        except UnknownTopicOrPartitionError:
            return False
        except Exception as err:
            raise TopicManagerError(
                f"Error checking partitions for topic {topic}: {err}"
            ) from err
        if len(partitions) != npar:
            raise TopicManagerError(
                f"topic {topic} has {len(partitions)} partitions instead of {npar}"
            )
        return True

    def _create_topic(
        self, topic: str, npar: int, rfactor: int, config: dict[str, str]
    ) -> None:
        request = {
            "timeout": CREATE_TOPICS_TIMEOUT,
            "topic_details": {
                topic: {
                    "num_partitions": npar,
                    "replication_factor": rfactor,
                    "config_entries": dict(config),
                }
            },
        }
        try:
            self.broker.create_topics(request)
        except Exception as err:
            topic_errors = getattr(err, "topic_errors", None) or {}
            details = "\n".join(f"{name}: {msg}" for name, msg in topic_errors.items())
            raise TopicManagerError(
                f"error creating topic {topic}, npar={npar}, rfactor={rfactor}, "
                f"config={config!r}: {err}\ntopic errors:\n{details}"
            ) from err

    def _ensure_exists(
        self, topic: str, npar: int, rfactor: int, config: dict[str, str]
    ) -> None:
        try:
            exists = self._exists_with_partitions(topic, npar)
        except TopicManagerError as err:
            raise TopicManagerError(f"error checking topic exists: {err}") from err
        if not exists:
            self._create_topic(topic, npar, rfactor, config)

    def ensure_table_exists(self, topic: str, npar: int) -> None:
        """Ensure a log-compacted topic exists."""
        self._ensure_exists(
            topic, npar, self.config.table_replication, {"cleanup.policy": "compact"}
        )

    def ensure_stream_exists(self, topic: str, npar: int) -> None:
        """Ensure a stream topic with the configured retention exists."""
        retention_ms = self.config.stream_retention // timedelta(milliseconds=1)
        self._ensure_exists(
            topic,
            npar,
            self.config.stream_replication,
            {"retention.ms": str(retention_ms)},
        )

    def ensure_topic_exists(
        self, topic: str, npar: int, rfactor: int, config: dict[str, str]
    ) -> None:
        """Ensure a topic exists, creating it with ``config`` if missing."""
        self._ensure_exists(topic, npar, rfactor, config)