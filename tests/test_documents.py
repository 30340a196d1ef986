import io
from types import SimpleNamespace

import pytest

from sofakit.common import CouchError
from sofakit.documents import (
    BulkGetReference,
    ClusterConfig,
    DBStats,
    Members,
    PurgeResult,
    RevDiff,
    Row,
    Rows,
    Security,
)


class _ListFeed:
    def __init__(self, items):
        self.items = list(items)
        self.closed = False

    def next(self):
        if not self.items:
            raise StopIteration
        return self.items.pop(0)

    def close(self):
        self.closed = True


def test_row_scan_doc_success():
    body = io.BytesIO(b'{"foo":123.4}')
    row = Row(body=body)
    assert row.scan_doc() == {"foo": 123.4}
    assert body.closed


def test_row_scan_doc_invalid_json():
    row = Row(body=io.BytesIO(b"invalid json"))
    with pytest.raises(CouchError) as info:
        row.scan_doc()
    assert info.value.status == 500


def test_row_scan_doc_raises_fetch_error():
    err = CouchError("db error", 502)
    row = Row(err=err)
    with pytest.raises(CouchError) as info:
        row.scan_doc()
    assert info.value is err
    assert info.value.status == 502


def test_row_fields():
    row = Row(content_length=13, rev="1-xxx", body=io.BytesIO(b'{"_id":"foo"}'))
    assert row.content_length == 13
    assert row.rev == "1-xxx"
    assert row.scan_doc() == {"_id": "foo"}


def test_rows_iterates_feed_and_closes():
    feed = _ListFeed([{"id": "a"}, {"id": "b"}])
    rows = Rows(feed)
    assert rows.source is feed
    assert list(rows) == [{"id": "a"}, {"id": "b"}]
    assert feed.closed
    assert rows.error() is None


def test_rows_current_before_next():
    rows = Rows(_ListFeed([{"id": "a"}]))
    with pytest.raises(CouchError) as info:
        rows.current()
    assert info.value.status == 400


def test_stats_from_driver():
    driver_stats = SimpleNamespace(
        name="foo",
        compact_running=True,
        doc_count=1,
        deleted_count=2,
        update_seq="abc",
        disk_size=3,
        active_size=4,
        external_size=5,
        cluster=SimpleNamespace(replicas=6, shards=7, read_quorum=8, write_quorum=9),
        raw_response=b"foo",
    )
    expected = DBStats(
        name="foo",
        compact_running=True,
        doc_count=1,
        deleted_count=2,
        update_seq="abc",
        disk_size=3,
        active_size=4,
        external_size=5,
        cluster=ClusterConfig(replicas=6, shards=7, read_quorum=8, write_quorum=9),
        raw_response=b"foo",
    )
    assert DBStats.from_driver(driver_stats) == expected


def test_stats_from_mapping_without_cluster():
    stats = DBStats.from_driver({"name": "bar", "doc_count": 10})
    assert stats.name == "bar"
    assert stats.doc_count == 10
    assert stats.cluster is None
    assert stats.raw_response == b""


def test_security_defaults_are_independent():
    first = Security()
    second = Security()
    first.admins.names.append("a")
    assert second.admins.names == []
    assert first.admins == Members(names=["a"], roles=[])


def test_security_equality():
    sec = Security(
        admins=Members(names=["a"], roles=["b"]),
        members=Members(names=["c"], roles=["d"]),
    )
    assert sec == Security(Members(["a"], ["b"]), Members(["c"], ["d"]))
    assert sec != Security()


def test_purge_result():
    doc_map = {"foo": ["1-abc", "2-xyz"]}
    assert PurgeResult(seq=2).purged is None
    assert PurgeResult(seq=2, purged=doc_map) == PurgeResult(2, {"foo": ["1-abc", "2-xyz"]})


def test_bulk_get_reference_defaults():
    ref = BulkGetReference(id="foo")
    assert (ref.id, ref.rev, ref.atts_since) == ("foo", "", "")


def test_rev_diff_defaults():
    diff = RevDiff(missing=["1-a"])
    assert diff.missing == ["1-a"]
    assert diff.possible_ancestors == []