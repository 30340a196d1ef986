"""Shared error type, option merging, JSON helpers and the result iterator."""

from __future__ import annotations

import dataclasses
import json
import threading
from collections.abc import Iterator, Mapping
from typing import Any

VERSION = "2.0.0-prerelease"
VENDOR = "Sofakit"

SESSION_COOKIE_NAME = "AuthSession"
"""Name of the CouchDB session cookie."""

USER_PREFIX = "org.couchdb.user:"
"""Mandatory prefix of CouchDB user document IDs."""

END_KEY_SUFFIX = "\ufff0"
"""High code point to append to an end key when searching a string range."""


class CouchError(Exception):
    """An error carrying an HTTP status code; the status defaults to 500."""

    def __init__(
        self,
        message: str | None = None,
        status: int = 500,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message or ""
        self._status = status or 500
        self.cause = cause
        super().__init__(str(self))
        if cause is not None:
            self.__cause__ = cause

    @property
    def status(self) -> int:
        """The HTTP status code associated with the error."""
        return self._status

    def __str__(self) -> str:
        if self.message:
            return self.message
        if self.cause is not None:
            return str(self.cause)
        return ""


def missing_arg(name: str) -> CouchError:
    """Build the error reported when a required argument is empty."""
    return CouchError(f"sofakit: {name} required", 400)


def merge_options(*args: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Merge option mappings left to right; None when there is nothing to merge."""
    merged: dict[str, Any] = {}
    for options in args:
        if options:
            merged.update(options)
    return merged or None


def normalize_from_json(doc: Any) -> Any:
    """Decode raw JSON (bytes or a readable stream) to a dict; pass anything else through."""
    if isinstance(doc, (bytes, bytearray, memoryview)):
        body: Any = bytes(doc)
    elif callable(getattr(doc, "read", None)):
        try:
            body = doc.read()
        except OSError as exc:
            raise CouchError(status=400, cause=exc) from exc
    else:
        return doc
    try:
        value = json.loads(body)
    except ValueError as exc:
        raise CouchError(status=400, cause=exc) from exc
    if value is not None and not isinstance(value, dict):
        raise CouchError("JSON document is not an object", 400)
    return value


def _plain(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def extract_doc_id(doc: Any) -> str | None:
    """Return the document's ``_id``, or None if it has none."""
    if doc is None:
        return None
    if isinstance(doc, Mapping):
        doc_id = doc.get("_id")
        return doc_id if isinstance(doc_id, str) else None
    try:
        decoded = json.loads(json.dumps(doc, default=_plain))
    except (TypeError, ValueError):
        return None
    if isinstance(decoded, dict):
        doc_id = decoded.get("_id")
        if isinstance(doc_id, str) and doc_id:
            return doc_id
    return None


class ResultIterator:
    """Iterates over a driver feed, holding the current value between calls to next().

    A feed offers ``next()``, which returns a value or raises StopIteration when
    exhausted, and optionally ``close()``.
    """

    def __init__(self, feed: Any, initial: Any = None) -> None:
        self._feed = feed
        self._current = initial
        self._ready = False
        self._closed = False
        self._error: BaseException | None = None
        self._lock = threading.RLock()

    def next(self) -> bool:
        """Advance to the next value; False when the feed is done or failed."""
        with self._lock:
            if self._closed:
                return False
            try:
                value = self._feed.next()
            except StopIteration:
                self._finish(None)
                return False
            except Exception as exc:  # the feed's failure is reported via error()
                self._finish(exc)
                return False
            self._current = value
            self._ready = True
            return True

    def _finish(self, error: BaseException | None) -> None:
        self._error = error
        self._closed = True
        self._ready = False
        close = getattr(self._feed, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception as exc:
            if self._error is None:
                self._error = exc

    def error(self) -> BaseException | None:
        """The error met during iteration, if any."""
        return self._error

    def close(self) -> None:
        """Close the feed; calling it again does nothing."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._ready = False
            close = getattr(self._feed, "close", None)
            if close is not None:
                close()

    def current(self) -> Any:
        """The value read by the last successful next()."""
        with self._lock:
            if self._closed:
                raise CouchError("sofakit: iterator is closed", 400)
            if not self._ready:
                raise CouchError("sofakit: iterator access before calling next", 400)
            return self._current

    def __iter__(self) -> Iterator[Any]:
        while self.next():
            yield self.current()
        if self._error is not None:
            raise self._error

    def __enter__(self) -> ResultIterator:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()