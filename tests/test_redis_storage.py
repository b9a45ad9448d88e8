import fnmatch

import pytest

from streamtable.storage.redis_storage import RedisIterator, RedisStorage, redis_builder


class FakeRedis:
    def __init__(self, ping_error=None):
        self.hashes = {}
        self.ping_error = ping_error

    def _h(self, name):
        return self.hashes.setdefault(name, {})

    @staticmethod
    def _k(key):
        return key.encode() if isinstance(key, str) else key

    def ping(self):
        if self.ping_error:
            raise self.ping_error
        return True

    def hexists(self, name, key):
        return self._k(key) in self._h(name)

    def hget(self, name, key):
        return self._h(name).get(self._k(key))

    def hset(self, name, key, value):
        self._h(name)[self._k(key)] = value
        return 1

    def hdel(self, name, key):
        return 1 if self._h(name).pop(self._k(key), None) is not None else 0

    def hscan(self, name, cursor=0, match=None, count=None):
        fields = {
            k: v
            for k, v in sorted(self._h(name).items())
            if match is None or fnmatch.fnmatchcase(k.decode(), match)
        }
        return 0, fields


@pytest.fixture
def client():
    return FakeRedis()


@pytest.fixture
def store(client):
    return RedisStorage(client, "ns:topic:0")


def test_none_client_rejected():
    with pytest.raises(ValueError, match="invalid redis client"):
        RedisStorage(None, "h")


def test_ping_failure_propagates():
    with pytest.raises(ConnectionError):
        RedisStorage(FakeRedis(ping_error=ConnectionError("down")), "h")


def test_set_get_has_delete(store):
    assert store.has("key-1") is False
    assert store.get("key-1") is None
    store.set("key-1", b"content-1")
    assert store.has("key-1") is True
    assert store.get("key-1") == b"content-1"
    store.delete("key-1")
    assert store.has("key-1") is False
    assert store.get("key-1") is None


def test_writes_go_to_named_hash(client, store):
    store.set("k", b"v")
    assert store.get("k") == b"v"
    assert client.hashes["ns:topic:0"] == {b"k": b"v"}
    other = RedisStorage(client, "ns:topic:1")
    assert other.get("k") is None
    assert other.has("k") is False


def test_offset_default_and_roundtrip(store):
    assert store.get_offset(-2) == -2
    store.set_offset(777)
    assert store.get_offset(0) == 777


def test_offset_stored_as_decimal_text(store):
    store.set_offset(42)
    assert store.get("__offset") == b"42"


def test_offset_decode_error(client, store):
    client.hset("ns:topic:0", "__offset", b"abc")
    with pytest.raises(ValueError, match="error decoding redis offset"):
        store.get_offset(0)


def test_get_wraps_client_error(store, client):
    def broken(name, key):
        raise OSError("boom")

    client.hexists = broken
    with pytest.raises(RuntimeError, match="error checking for existence in redis"):
        store.get("k")


def test_iterator_skips_offset(store):
    kv = {"key-1": b"val-1", "key-2": b"val-2", "key-3": b"val-3"}
    for k, v in kv.items():
        store.set(k, v)
    store.set_offset(5)
    found = {}
    it = store.iterator()
    assert it.value() is None
    while it.next():
        found[it.key().decode()] = it.value()
    assert found == kv
    assert it.key() is None
    assert it.value() is None


def test_iterator_release_exhausts(store):
    store.set("a", b"1")
    it = store.iterator()
    it.release()
    assert it.next() is False


def test_iterator_with_range_uses_pattern(store):
    store.set("user-1", b"a")
    store.set("user-2", b"b")
    store.set("other", b"c")
    with store.iterator_with_range(b"user-*", None) as it:
        keys = sorted(k for k, _ in it)
    assert keys == [b"user-1", b"user-2"]


def test_seek_reports_remaining(client):
    it = RedisIterator([b"a"], client, "h")
    assert it.seek(b"a") is True
    it.release()
    assert it.seek(b"a") is False


def test_recovered_is_always_false(store):
    store.mark_recovered()
    assert store.recovered() is False


def test_builder_hash_name(client):
    st = redis_builder(client, "ns")("topic", 3)
    assert st.hash_name == "ns:topic:3"


def test_builder_requires_namespace(client):
    with pytest.raises(ValueError, match="missing namespace"):
        redis_builder(client, "")("topic", 0)