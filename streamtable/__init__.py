"""Table storages, a topic manager and an in-memory broker harness for stream processing."""

__version__ = "0.1.0"