"""Factories building one storage per topic partition."""

from __future__ import annotations

import os
from collections.abc import Callable

from streamtable.storage.base import Storage
from streamtable.storage.disk import DiskStorage
from streamtable.storage.memory import MemoryStorage

Builder = Callable[[str, int], Storage]
"""Creates the storage for a (topic, partition) pair."""


def default_builder(path: str | os.PathLike) -> Builder:
    """Build on-disk storages in ``<path>/<topic>.<partition>``."""

    def build(topic: str, partition: int) -> Storage:
        return DiskStorage(os.path.join(path, f"{topic}.{partition}"))

    return build


def memory_builder() -> Builder:
    """Build a fresh in-memory storage for each partition."""

    def build(topic: str, partition: int) -> Storage:
        return MemoryStorage()

    return build