import threading

import pytest

from streamtable.tester.queue import Message, Queue


def test_empty_queue():
    q = Queue("topic")
    assert len(q) == 0
    assert q.hwm() == 0
    assert q.messages_from_offset(0) == []
    assert q.topic == "topic"


def test_push_assigns_sequential_offsets():
    q = Queue("topic")
    offsets = [q.push(f"k{i}", f"v{i}".encode()) for i in range(5)]
    assert offsets == list(range(5))
    assert q.hwm() == len(q) == 5


def test_message_returns_pushed_content():
    q = Queue("topic")
    q.push("a", b"1")
    offset = q.push("b", b"2")
    msg = q.message(offset)
    assert msg == Message(offset, "b", b"2")


def test_push_none_value():
    q = Queue("topic")
    offset = q.push("key", None)
    assert q.message(offset).value is None


def test_messages_from_offset():
    q = Queue("topic")
    for key in ("a", "b", "c"):
        q.push(key, key.encode())
    tail = q.messages_from_offset(1)
    assert [m.key for m in tail] == ["b", "c"]
    assert [m.offset for m in tail] == [1, 2]
    assert q.messages_from_offset(q.hwm()) == []


def test_message_out_of_range():
    q = Queue("topic")
    with pytest.raises(IndexError):
        q.message(0)


def test_concurrent_pushes_get_unique_offsets():
    q = Queue("topic")
    results = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            off = q.push("k", b"v")
            with lock:
                results.append(off)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(results) == list(range(len(results)))
    assert q.hwm() == len(results)