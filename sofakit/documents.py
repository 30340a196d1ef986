"""Documents, rows and database metadata returned by database operations."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from sofakit.common import CouchError, ResultIterator


def _field(source: Any, name: str, default: Any = None) -> Any:
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


class Rows(ResultIterator):
    """Iterates over the rows of a view, listing or bulk query.

    The feed offers ``next()``, returning a row or raising StopIteration when
    exhausted, and optionally ``close()``.
    """

    def __init__(self, feed: Any) -> None:
        super().__init__(feed, None)
        self.source = feed


@dataclass
class Row:
    """The result of fetching a single document.

    ``body`` is a binary stream of the document's JSON; ``err`` holds the error
    met while fetching it, raised again by scan_doc().
    """

    content_length: int = 0
    rev: str = ""
    body: BinaryIO | None = field(default=None, repr=False, compare=False)
    err: BaseException | None = None
    attachments: Any = None

    def scan_doc(self) -> Any:
        """Decode the document body and close it; raises the fetch error if any."""
        if self.err is not None:
            raise self.err
        if self.body is None:
            raise CouchError("sofakit: document has no body", 500)
        try:
            data = self.body.read()
        finally:
            self.body.close()
        try:
            return json.loads(data)
        except ValueError as exc:
            raise CouchError(status=500, cause=exc) from exc


@dataclass
class Members:
    """User names and roles in one part of a security document."""

    names: list[str] = field(default_factory=list)
    roles: list[str] = field(default_factory=list)


@dataclass
class Security:
    """A database's security document."""

    admins: Members = field(default_factory=Members)
    members: Members = field(default_factory=Members)


@dataclass
class ClusterConfig:
    """The cluster replication settings of a database."""

    replicas: int = 0
    shards: int = 0
    read_quorum: int = 0
    write_quorum: int = 0


@dataclass
class DBStats:
    """Database statistics."""

    name: str = ""
    compact_running: bool = False
    doc_count: int = 0
    deleted_count: int = 0
    update_seq: str = ""
    disk_size: int = 0
    active_size: int = 0
    external_size: int = 0
    cluster: ClusterConfig | None = None
    raw_response: bytes = b""

    @classmethod
    def from_driver(cls, stats: Any) -> DBStats:
        """Build statistics from a driver's result (an object or a mapping)."""
        cluster_source = _field(stats, "cluster")
        cluster = None
        if cluster_source is not None:
            cluster = ClusterConfig(
                replicas=_field(cluster_source, "replicas", 0),
                shards=_field(cluster_source, "shards", 0),
                read_quorum=_field(cluster_source, "read_quorum", 0),
                write_quorum=_field(cluster_source, "write_quorum", 0),
            )
        raw = _field(stats, "raw_response", b"") or b""
        return cls(
            name=_field(stats, "name", ""),
            compact_running=_field(stats, "compact_running", False),
            doc_count=_field(stats, "doc_count", 0),
            deleted_count=_field(stats, "deleted_count", 0),
            update_seq=_field(stats, "update_seq", ""),
            disk_size=_field(stats, "disk_size", 0),
            active_size=_field(stats, "active_size", 0),
            external_size=_field(stats, "external_size", 0),
            cluster=cluster,
            raw_response=bytes(raw),
        )


@dataclass
class PurgeResult:
    """The result of a purge: its sequence number and the revisions purged per document."""

    seq: int = 0
    purged: dict[str, list[str]] | None = None


@dataclass
class BulkGetReference:
    """A document to fetch in a bulk get, optionally at a given revision."""

    id: str
    rev: str = ""
    atts_since: str = ""


@dataclass
class RevDiff:
    """The missing revisions of one document, as reported by a revs diff."""

    missing: list[str] = field(default_factory=list)
    possible_ancestors: list[str] = field(default_factory=list)