import pytest

from streamtable.storage.base import OFFSET_KEY, Iterator, Storage


class ListIterator(Iterator):
    def __init__(self, pairs):
        self.pairs = list(pairs)
        self.pos = -1
        self.released = False

    def next(self):
        self.pos += 1
        return self.pos < len(self.pairs)

    def key(self):
        if 0 <= self.pos < len(self.pairs):
            return self.pairs[self.pos][0]
        return None

    def value(self):
        if 0 <= self.pos < len(self.pairs):
            return self.pairs[self.pos][1]
        return None

    def release(self):
        self.released = True
        self.pos = len(self.pairs)

    def seek(self, key):
        self.pairs = [p for p in self.pairs if p[0] >= key]
        self.pos = -1
        return bool(self.pairs)


def test_iterator_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Iterator()


def test_storage_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Storage()


def test_iter_yields_pairs_in_order():
    pairs = [(b"a", b"1"), (b"b", b"2")]
    assert list(Iterator.__iter__(ListIterator(pairs))) == pairs


def test_iter_of_empty_iterator_is_empty():
    assert list(Iterator.__iter__(ListIterator([]))) == []


def test_context_manager_releases():
    it = ListIterator([(b"a", b"1")])
    entered = Iterator.__enter__(it)
    assert entered is it
    assert it.released is False
    Iterator.__exit__(it, None, None, None)
    assert it.released is True
    assert it.next() is False


def test_iter_after_seek():
    it = ListIterator([(b"a", b"1"), (b"b", b"2"), (b"c", b"3")])
    assert it.seek(b"b") is True
    assert [k for k, _ in Iterator.__iter__(it)] == [b"b", b"c"]


def test_offset_key_is_reserved_name():
    it = ListIterator([(OFFSET_KEY.encode(), b"7")])
    assert dict(Iterator.__iter__(it)) == {b"__offset": b"7"}