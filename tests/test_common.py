import dataclasses
import io

import pytest

from sofakit.common import (
    CouchError,
    ResultIterator,
    extract_doc_id,
    merge_options,
    missing_arg,
    normalize_from_json,
)


class ErrorReader:
    def read(self, *_):
        raise OSError("errorReader")


class ListFeed:
    def __init__(self, items=(), next_error=None, close_error=None):
        self.items = list(items)
        self.next_error = next_error
        self.close_error = close_error
        self.close_calls = 0

    def next(self):
        if self.next_error is not None:
            raise self.next_error
        if not self.items:
            raise StopIteration
        return self.items.pop(0)

    def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


@dataclasses.dataclass
class IdDoc:
    _id: str


def test_couch_error_defaults_to_500_and_uses_cause_text():
    err = CouchError(cause=ValueError("boom"))
    assert err.status == 500
    assert str(err) == "boom"


def test_couch_error_message_wins():
    err = CouchError("msg", 502, RuntimeError("other"))
    assert (str(err), err.status) == ("msg", 502)


def test_missing_arg():
    err = missing_arg("docID")
    assert err.status == 400
    assert str(err) == "sofakit: docID required"


def test_merge_options():
    assert merge_options({"a": 1}, None, {"a": 2, "b": 3}) == {"a": 2, "b": 3}
    assert merge_options() is None
    assert merge_options(None, {}) is None


@pytest.mark.parametrize(
    "doc, expected",
    [
        (5, 5),
        (b'{"foo":"bar"}', {"foo": "bar"}),
        (bytearray(b'{"foo":"bar"}'), {"foo": "bar"}),
        (io.StringIO('{"foo":"bar"}'), {"foo": "bar"}),
        (io.BytesIO(b'{"foo":"bar"}'), {"foo": "bar"}),
    ],
)
def test_normalize_from_json(doc, expected):
    assert normalize_from_json(doc) == expected


def test_normalize_invalid_json():
    with pytest.raises(CouchError) as info:
        normalize_from_json(b"invalid")
    assert info.value.status == 400


def test_normalize_error_reader():
    with pytest.raises(CouchError) as info:
        normalize_from_json(ErrorReader())
    assert info.value.status == 400
    assert str(info.value) == "errorReader"


def test_normalize_non_object():
    with pytest.raises(CouchError) as info:
        normalize_from_json(b"[1, 2]")
    assert info.value.status == 400


@pytest.mark.parametrize(
    "doc, expected",
    [
        (None, None),
        ({"value": "foo"}, None),
        ({"_id": "foo"}, "foo"),
        ({"_id": 5}, None),
        (object(), None),
        (IdDoc("oink"), "oink"),
        (IdDoc(""), None),
        (123, None),
    ],
)
def test_extract_doc_id(doc, expected):
    assert extract_doc_id(doc) == expected


def test_next_true():
    it = ResultIterator(ListFeed([1]))
    assert it.next() is True
    assert it.current() == 1


def test_next_false():
    feed = ListFeed([])
    it = ResultIterator(feed)
    assert it.next() is False
    assert feed.close_calls == 1
    assert it.error() is None


def test_current_before_next():
    it = ResultIterator(ListFeed([1]))
    with pytest.raises(CouchError) as info:
        it.current()
    assert str(info.value) == "sofakit: iterator access before calling next"
    assert info.value.status == 400


def test_current_after_close():
    it = ResultIterator(ListFeed([1]))
    it.next()
    it.close()
    with pytest.raises(CouchError) as info:
        it.current()
    assert str(info.value) == "sofakit: iterator is closed"
    assert info.value.status == 400


def test_closed_iterator_next_false():
    it = ResultIterator(ListFeed([1]))
    it.close()
    assert it.next() is False


def test_error_recorded():
    failure = RuntimeError("bulk error")
    it = ResultIterator(ListFeed(next_error=failure))
    assert it.next() is False
    assert it.error() is failure


def test_close_error():
    it = ResultIterator(ListFeed(close_error=RuntimeError("close error")))
    with pytest.raises(RuntimeError, match="close error"):
        it.close()


def test_close_idempotent():
    feed = ListFeed([1])
    it = ResultIterator(feed)
    it.close()
    it.close()
    assert feed.close_calls == 1


def test_iteration_yields_values():
    assert list(ResultIterator(ListFeed([1, 2, 3]))) == [1, 2, 3]


def test_iteration_raises_feed_error():
    with pytest.raises(RuntimeError, match="fail"):
        list(ResultIterator(ListFeed(next_error=RuntimeError("fail"))))


def test_context_manager_closes():
    feed = ListFeed([1])
    with ResultIterator(feed) as it:
        assert it.next() is True
    assert feed.close_calls == 1