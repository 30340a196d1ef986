"""Iterating a database's changes feed."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from sofakit.common import CouchError, ResultIterator


@dataclass
class Change:
    """One entry of a changes feed; ``doc`` holds raw JSON when documents are included."""

    id: str = ""
    seq: str = ""
    deleted: bool = False
    changes: list[str] = field(default_factory=list)
    doc: Any = None


class Changes(ResultIterator):
    """Iterates over a changes feed.

    The feed offers ``next()``, returning a Change or raising StopIteration,
    optionally ``close()``, and ``last_seq``, ``pending`` and ``etag`` as
    attributes or methods.
    """

    def __init__(self, feed: Any) -> None:
        super().__init__(feed, Change())
        self._source = feed

    def _feed_value(self, name: str, default: Any) -> Any:
        value = getattr(self._source, name, default)
        return value() if callable(value) else value

    @property
    def changes(self) -> list[str]:
        """Changed revisions of the current entry."""
        return list(self.current().changes)

    @property
    def deleted(self) -> bool:
        """Whether the current entry relates to a deleted document."""
        return self.current().deleted

    @property
    def id(self) -> str:
        """Document ID of the current entry."""
        return self.current().id

    @property
    def seq(self) -> str:
        """Update sequence of the current entry."""
        return self.current().seq

    @property
    def last_seq(self) -> str:
        """Last update sequence of the change set; reliable only once iteration is done."""
        return self._feed_value("last_seq", "")

    @property
    def pending(self) -> int:
        """Count of items remaining in the feed; reliable only once iteration is done."""
        return self._feed_value("pending", 0)

    @property
    def etag(self) -> str:
        """The unquoted ETag of the response, available before iteration."""
        return self._feed_value("etag", "")

    def scan_doc(self) -> Any:
        """Decode the document included with the current entry."""
        doc = self.current().doc
        if doc is not None and not isinstance(doc, (str, bytes, bytearray)):
            return doc
        try:
            return json.loads(doc or b"")
        except ValueError as exc:
            raise CouchError(status=500, cause=exc) from exc