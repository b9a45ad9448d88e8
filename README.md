# streamtable

Local key-value table storages, a topic manager and an in-memory test
harness for stream processing applications. The package has no runtime
dependencies.

## Storages

Every storage implements `streamtable.storage.base.Storage`: `has`, `get`,
`set`, `delete`, `get_offset`, `set_offset`, `mark_recovered`, `recovered`,
`iterator`, `iterator_with_range`, `open` and `close`. Keys are `str`,
values are `bytes`; `get` returns `None` for a missing key. The offset is
stored under the reserved key `__offset` (`OFFSET_KEY`), which iterators
skip.

- `MemoryStorage` (`streamtable.storage.memory`): keeps pairs in a
  dictionary. Setting `None` raises `ValueError`.
- `DiskStorage` (`streamtable.storage.disk`): persistent storage in a
  database file inside a directory. Writes are collected in one transaction
  until `mark_recovered` (or `close`) commits it. Iterators work on a
  key-ordered snapshot; `seek` moves to the first key greater than or equal
  to the given one.
- `AppendFileStorage` (`streamtable.storage.append`): appends each value as
  a line to a `part-<n>` file in a directory. Nothing can be read back;
  `bytes_written` counts the value bytes written.
- `NullStorage` (`streamtable.storage.null`): discards everything.
- `RedisStorage` (`streamtable.storage.redis_storage`): keeps a table
  partition in a Redis hash. You pass in the client; it must offer `ping`,
  `hexists`, `hget`, `hset`, `hdel` and `hscan`. `redis_builder(client,
  namespace)` names the hashes `<namespace>:<topic>:<partition>`.

Builders (`streamtable.storage.builders`) create one storage per topic
partition. `default_builder(path)` creates a `DiskStorage` in
`<path>/<topic>.<partition>`; `memory_builder()` creates a fresh
`MemoryStorage` each time.

```python
from streamtable.storage.builders import default_builder

build = default_builder("/tmp/tables")
st = build("user-table", 0)
st.set("alice", b"42")
assert st.get("alice") == b"42"
st.mark_recovered()
st.close()
```

Iterators are positioned before the first pair and can be driven with
`next`, `key` and `value`, or used as Python iterators and context managers
(leaving the `with` block releases them):

```python
with st.iterator() as it:
    for key, value in it:
        print(key, value)
```

`MergeIterator` (`streamtable.storage.merge`) merges sorted iterators, for
example one per partition, into a single sequence in key order. Releasing
it releases every sub-iterator.

## Topic manager

`streamtable.topic_manager.TopicManager(brokers, client, config)` checks
that topics exist with the expected number of partitions and creates them
through the client's first broker when they are missing:

- `ensure_table_exists` creates topics with `cleanup.policy=compact` and
  the table replication factor;
- `ensure_stream_exists` uses the stream replication factor and sets
  `retention.ms` from the stream retention;
- `ensure_topic_exists` uses the replication factor and configuration you
  give.

`TopicManagerConfig` defaults to replication 2 for tables and streams and a
stream retention of one hour. The client object must provide `brokers`,
`partitions`, `get_offset` and `close`, and raise
`UnknownTopicOrPartitionError` for missing topics; brokers must provide
`open`, `connected`, `addr` and `create_topics`. `check_broker` opens a
broker connection and verifies that it is connected. Failures are raised as
`TopicManagerError`.

## Test harness

`streamtable.tester.tester.Tester` keeps each topic as a `Queue`
(`streamtable.tester.queue`) of `Message`s with offsets counting up from 0,
and each table as a shared `MemoryStorage`.

```python
import json

from streamtable.tester.tester import Codec, Tester


class JsonCodec(Codec):
    def encode(self, value):
        return json.dumps(value).encode()

    def decode(self, data):
        return json.loads(data)


tester = Tester()
tester.register_emitter("events", JsonCodec())
tracker = tester.new_queue_tracker("events")
tester.consume("events", "key", {"n": 1})
assert tracker.next() == ("key", {"n": 1})

tester.register_codec("counts", JsonCodec())
tester.set_table_value("counts", "alice", 3)
assert tester.table_value("counts", "alice") == 3
```

- `emit` appends raw bytes; `consume` encodes with the topic's codec
  (`None` is appended as is). Both return the offset.
- `QueueTracker` reads the messages arriving after it was created
  (`next`, `next_raw`, `seek`, `hwm`, `next_offset`).
- `clear_values` empties every table storage.
- `storage_builder()` and `topic_manager_builder()` hand out the tester's
  storages and its `MockTopicManager` (`streamtable.tester.topic_manager`),
  which supports single-partition topics only and answers `get_offset` for
  `OFFSET_OLDEST` and `OFFSET_NEWEST`.

## What the package does not do

There is no broker client, stream processor, table view, emitter or
consumer group here, and no web monitoring or query interface. The tester
only records messages and table values; it does not run processors or
deliver messages to anything. The topic manager works with client and
broker objects you supply.

## Running the tests

```
pip install -e ".[test]"
pytest
```