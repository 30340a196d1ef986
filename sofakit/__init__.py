"""Errors, JSON helpers, iterators, attachments and server calls for CouchDB-like databases."""

__version__ = "2.0.0"

__all__ = ["common", "attachments", "bulk", "changes", "client", "documents"]