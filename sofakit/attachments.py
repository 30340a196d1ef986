"""File attachments on documents."""

from __future__ import annotations

import base64
import binascii
import io
import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, BinaryIO

from sofakit.common import missing_arg


def _empty_content() -> BinaryIO:
    return io.BytesIO(b"")


def _load(data: Any) -> Any:
    if isinstance(data, (str, bytes, bytearray)):
        return json.loads(data)
    return data


def _coerce(key: str, value: Any, kind: type) -> Any:
    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif isinstance(value, kind):
        return value
    raise ValueError(f"attachment field {key!r} has an invalid value: {value!r}")


_JSON_FIELDS: dict[str, tuple[str, type]] = {
    "content_type": ("content_type", str),
    "stub": ("stub", bool),
    "follows": ("follows", bool),
    "length": ("size", int),
    "encoding": ("content_encoding", str),
    "encoded_length": ("encoded_length", int),
    "revpos": ("rev_pos", int),
    "digest": ("digest", str),
}


@dataclass
class Attachment:
    """A file attached to a document.

    ``content`` is a binary stream; it is empty for stubs and metadata.
    """

    filename: str = ""
    content_type: str = ""
    stub: bool = False
    follows: bool = False
    content: BinaryIO = field(default_factory=_empty_content, repr=False, compare=False)
    size: int = 0
    content_encoding: str = ""
    encoded_length: int = 0
    rev_pos: int = 0
    digest: str = ""

    def validate(self) -> None:
        """Raise if the attachment has no filename."""
        if not self.filename:
            raise missing_arg("filename")

    def _read_content(self) -> bytes:
        if self.content is None:
            return b""
        try:
            data = self.content.read()
        finally:
            self.content.close()
        return data.encode("utf-8") if isinstance(data, str) else bytes(data)

    def to_json(self) -> dict[str, Any]:
        """The attachment as a JSON-ready dict; inline content is read and closed."""
        doc: dict[str, Any] = {"content_type": self.content_type}
        if self.stub:
            doc["stub"] = True
        elif self.follows:
            doc["follows"] = True
        else:
            data = self._read_content()
            if data:
                doc["data"] = base64.b64encode(data).decode("ascii")
        if self.size:
            doc["length"] = self.size
        if self.rev_pos:
            doc["revpos"] = self.rev_pos
        if self.digest:
            doc["digest"] = self.digest
        return doc

    @classmethod
    def from_json(cls, data: Any) -> Attachment:
        """Build an attachment from a JSON object (text, bytes or a decoded mapping)."""
        doc = _load(data)
        if not isinstance(doc, Mapping):
            raise ValueError("attachment JSON must be an object")
        values: dict[str, Any] = {}
        for key, (attr, kind) in _JSON_FIELDS.items():
            value = doc.get(key)
            if value is not None:
                values[attr] = _coerce(key, value, kind)
        att = cls(**values)
        encoded = doc.get("data")
        if encoded is not None:
            if not isinstance(encoded, str):
                raise ValueError("attachment data must be a base64 string")
            try:
                att.content = io.BytesIO(base64.b64decode(encoded, validate=True))
            except binascii.Error as exc:
                raise ValueError(f"invalid attachment data: {exc}") from exc
        return att


class Attachments(dict):
    """Attachments of a document, keyed by filename."""

    @classmethod
    def from_json(cls, data: Any) -> Attachments:
        """Build the collection from a JSON object mapping filenames to attachments."""
        doc = _load(data)
        if not isinstance(doc, Mapping):
            raise ValueError("attachments JSON must be an object")
        result = cls()
        for filename, value in doc.items():
            att = Attachment.from_json(value)
            att.filename = filename
            result[filename] = att
        return result


class AttachmentsIterator:
    """Reads attachments streamed alongside a document.

    The source offers ``next()``, returning an Attachment or raising
    StopIteration when there are no more.
    """

    def __init__(self, source: Any) -> None:
        self._source = source

    def next(self) -> Attachment:
        """Return the next attachment; raises StopIteration at the end."""
        return replace(self._source.next())

    def __iter__(self) -> Iterator[Attachment]:
        while True:
            try:
                att = self.next()
            except StopIteration:
                return
            yield att