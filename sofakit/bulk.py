"""Creating and updating many documents in one call, and iterating the outcome."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sofakit.common import (
    CouchError,
    ResultIterator,
    extract_doc_id,
    merge_options,
    normalize_from_json,
)


@dataclass
class BulkResult:
    """The outcome of writing one document in a bulk operation."""

    id: str = ""
    rev: str = ""
    error: BaseException | None = None


class BulkResults(ResultIterator):
    """Iterates over the results of a bulk write.

    The feed offers ``next()``, returning a BulkResult or raising
    StopIteration when exhausted, and optionally ``close()``.
    """

    def __init__(self, feed: Any) -> None:
        super().__init__(feed, BulkResult())

    def _result(self) -> BulkResult | None:
        try:
            return self.current()
        except CouchError:
            return None

    @property
    def id(self) -> str:
        """Document ID of the current result, or "" when there is none."""
        result = self._result()
        return result.id if result is not None else ""

    @property
    def rev(self) -> str:
        """New revision of the current result, or "" when there is none."""
        result = self._result()
        return result.rev if result is not None else ""

    @property
    def update_error(self) -> BaseException | None:
        """The error writing the current document, as opposed to the iterator's own."""
        result = self._result()
        return result.error if result is not None else None


class EmulatedBulkResults:
    """A feed over results gathered in memory, one document at a time."""

    def __init__(self, results: Iterable[BulkResult]) -> None:
        self._results: deque[BulkResult] = deque(results)

    def next(self) -> BulkResult:
        """Return the next result; raises StopIteration when none are left."""
        if not self._results:
            raise StopIteration
        return self._results.popleft()

    def close(self) -> None:
        """Drop any results not yet read."""
        self._results.clear()


def docs_interface_slice(docs: Iterable[Any]) -> list[Any]:
    """Decode raw JSON documents to dicts, passing other documents through."""
    return [normalize_from_json(doc) for doc in docs]


def bulk_docs(db: Any, docs: Iterable[Any], *args: Any) -> BulkResults:
    """Write many documents at once through ``db``.

    Uses the driver's ``bulk_docs`` when ``db.driver_db`` has one; otherwise
    each document is written with ``db.put`` (when it carries an ``_id``) or
    ``db.create_doc``, and each failure is recorded in its result.
    """
    normalized = docs_interface_slice(docs)
    if not normalized:
        raise CouchError("sofakit: no documents provided", 400)
    options = merge_options(*args)
    driver_bulk = getattr(db.driver_db, "bulk_docs", None)
    if callable(driver_bulk):
        return BulkResults(driver_bulk(normalized, options))

    results: list[BulkResult] = []
    for doc in normalized:
        doc_id = extract_doc_id(doc)
        try:
            if doc_id is not None:
                rev = db.put(doc_id, doc, options)
            else:
                doc_id, rev = db.create_doc(doc, options)
        except Exception as exc:
            results.append(BulkResult(id=doc_id or "", error=exc))
            continue
        results.append(BulkResult(id=doc_id, rev=rev))
    return BulkResults(EmulatedBulkResults(results))