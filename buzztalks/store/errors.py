"""Exceptions raised by the document store."""
from __future__ import annotations


class StoreError(RuntimeError):
    """Raised when a read or write against the document store fails."""


class DocumentNotFoundError(StoreError):
    """Raised when an update targets a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"No document '{doc_id}' in collection '{collection}'")
        self.collection = collection
        self.doc_id = doc_id


class InvalidQueryError(StoreError, ValueError):
    """Raised when a query is constructed with unsupported parameters."""


__all__ = ["StoreError", "DocumentNotFoundError", "InvalidQueryError"]
