import pytest

from streamtable.tester.tester import Codec, Tester
from streamtable.tester.topic_manager import MockTopicManager


class StringCodec(Codec):
    def encode(self, value):
        return value.encode()

    def decode(self, data):
        return None if data is None else data.decode()


class OtherCodec(Codec):
    def encode(self, value):
        return str(value).encode()

    def decode(self, data):
        return data


class FailingCodec(Codec):
    def encode(self, value):
        raise RuntimeError("boom")

    def decode(self, data):
        raise RuntimeError("boom")


@pytest.fixture
def gkt():
    t = Tester()
    t.register_codec("input", StringCodec())
    t.register_codec("table", StringCodec())
    return t


def test_register_codec_creates_queue(gkt):
    queue = gkt.get_or_create_queue("input")
    assert queue.topic == "input"
    assert gkt.get_or_create_queue("input") is queue


def test_register_same_codec_type_twice(gkt):
    codec = StringCodec()
    gkt.register_codec("input", codec)
    assert gkt.codec_for_topic("input") is codec


def test_register_conflicting_codec(gkt):
    with pytest.raises(ValueError, match="different codecs"):
        gkt.register_codec("input", OtherCodec())


def test_register_emitter(gkt):
    codec = StringCodec()
    gkt.register_emitter("out", codec)
    assert gkt.codec_for_topic("out") is codec


def test_codec_for_unknown_topic(gkt):
    with pytest.raises(KeyError, match="no codec for topic nope registered"):
        gkt.codec_for_topic("nope")


def test_consume_encodes_message(gkt):
    offset = gkt.consume("input", "key", "value")
    msg = gkt.get_or_create_queue("input").message(offset)
    assert msg.key == "key"
    assert msg.value == b"value"


def test_consume_none_pushes_none(gkt):
    offset = gkt.consume("input", "key", None)
    assert gkt.get_or_create_queue("input").message(offset).value is None


def test_consume_encode_error():
    t = Tester()
    t.register_codec("input", FailingCodec())
    with pytest.raises(ValueError, match="Error encoding value"):
        t.consume("input", "k", "v")


def test_emit_offsets_follow_queue(gkt):
    first = gkt.emit("raw", "a", b"1")
    second = gkt.emit("raw", "b", b"2")
    assert second == first + 1
    assert gkt.get_or_create_queue("raw").hwm() == second + 1


def test_queue_tracker_reads_new_messages(gkt):
    gkt.consume("input", "old", "before")
    tracker = gkt.new_queue_tracker("input")
    assert tracker.next_offset() == tracker.hwm()
    assert tracker.next() is None

    gkt.consume("input", "k1", "v1")
    gkt.consume("input", "k2", "v2")
    assert tracker.next() == ("k1", "v1")
    assert tracker.next_raw() == ("k2", b"v2")
    assert tracker.next() is None
    assert tracker.next_offset() == tracker.hwm()


def test_queue_tracker_seek(gkt):
    gkt.consume("input", "a", "x")
    gkt.consume("input", "b", "y")
    tracker = gkt.new_queue_tracker("input")
    tracker.seek(0)
    assert tracker.next() == ("a", "x")
    assert tracker.next_offset() == 1


def test_table_value_roundtrip(gkt):
    gkt.set_table_value("table", "key", "value")
    assert gkt.table_value("table", "key") == "value"
    assert gkt.table_value("table", "missing") is None


def test_table_value_unknown_table(gkt):
    with pytest.raises(KeyError, match="topic table does not exist"):
        gkt.table_value("table", "key")


def test_storage_builder_shares_storage(gkt):
    build = gkt.storage_builder()
    storage = build("table", 0)
    assert build("table", 3) is storage
    storage.set("key", b"direct")
    assert gkt.table_value("table", "key") == "direct"


def test_clear_values(gkt):
    gkt.set_table_value("table", "a", "1")
    gkt.set_table_value("table", "b", "2")
    gkt.clear_values()
    assert gkt.table_value("table", "a") is None
    assert gkt.table_value("table", "b") is None


def test_topic_manager_builder(gkt):
    build = gkt.topic_manager_builder()
    tmgr = build(["broker"])
    assert isinstance(tmgr, MockTopicManager)
    assert build([]) is tmgr
    assert tmgr.partitions("input") == [0]