"""Immutable views of documents and query results handed to callers."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .query import Query


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    collection: str
    id: str
    data: dict[str, Any] | None

    @property
    def exists(self) -> bool:
        return self.data is not None

    def get(self, field_name: str, default: Any = None) -> Any:
        if self.data is None:
            return default
        return self.data.get(field_name, default)

    def to_dict(self) -> dict[str, Any]:
        """Return the document fields merged with its identifier."""

        return {**(self.data or {}), "id": self.id}


class ChangeType(StrEnum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class DocumentChange:
    type: ChangeType
    document: DocumentSnapshot


@dataclass(frozen=True, slots=True)
class QuerySnapshot:
    query: "Query | None"
    documents: list[DocumentSnapshot]
    changes: list[DocumentChange] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.documents)

    @property
    def empty(self) -> bool:
        return not self.documents

    @property
    def ids(self) -> list[str]:
        return [doc.id for doc in self.documents]

    def __iter__(self):
        return iter(self.documents)

    def __len__(self) -> int:
        return len(self.documents)


def diff_documents(
    previous: list[DocumentSnapshot] | None,
    current: list[DocumentSnapshot],
) -> list[DocumentChange]:
    """Compute added/modified/removed changes between two ordered result sets."""

    before = {doc.id: doc for doc in previous or []}
    after_ids = {doc.id for doc in current}
    changes: list[DocumentChange] = []
    for doc in current:
        prior = before.get(doc.id)
        if prior is None:
            changes.append(DocumentChange(ChangeType.ADDED, doc))
        elif prior.data != doc.data:
            changes.append(DocumentChange(ChangeType.MODIFIED, doc))
    for doc_id, prior in before.items():
        if doc_id not in after_ids:
            changes.append(DocumentChange(ChangeType.REMOVED, prior))
    return changes


__all__ = [
    "DocumentSnapshot",
    "ChangeType",
    "DocumentChange",
    "QuerySnapshot",
    "diff_documents",
]
