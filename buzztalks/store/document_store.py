"""SQLAlchemy-backed document store with live query subscriptions."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Document
from .errors import DocumentNotFoundError, StoreError
from .query import Query
from .snapshot import DocumentSnapshot, QuerySnapshot
from .subscriptions import ErrorCallback, Subscription, SubscriptionHub
from .transforms import apply_changes

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


def new_document_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class _SetOp:
    collection: str
    doc_id: str
    data: Mapping[str, Any]
    merge: bool = False


@dataclass(frozen=True, slots=True)
class _UpdateOp:
    collection: str
    doc_id: str
    changes: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class _DeleteOp:
    collection: str
    doc_id: str


_WriteOp = _SetOp | _UpdateOp | _DeleteOp


@dataclass
class WriteBatch:
    """Collects writes that are committed together in a single transaction."""

    store: "DocumentStore"
    _ops: list[_WriteOp] = field(default_factory=list)

    def create(self, collection: str, data: Mapping[str, Any]) -> str:
        """Queue a new document under a freshly generated id and return the id."""

        doc_id = new_document_id()
        self._ops.append(_SetOp(collection, doc_id, dict(data)))
        return doc_id

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False) -> "WriteBatch":
        self._ops.append(_SetOp(collection, doc_id, dict(data), merge))
        return self

    def update(self, collection: str, doc_id: str, changes: Mapping[str, Any]) -> "WriteBatch":
        self._ops.append(_UpdateOp(collection, doc_id, dict(changes)))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._ops.append(_DeleteOp(collection, doc_id))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    def commit(self) -> None:
        if not self._ops:
            return
        ops, self._ops = self._ops, []
        self.store._commit(ops)


class DocumentStore:
    """Collections of JSON documents with point reads, queries, batches and listeners."""

    def __init__(self, session_factory: SessionFactory, hub: SubscriptionHub | None = None) -> None:
        self._session_factory = session_factory
        self.hub = hub or SubscriptionHub()

    # Reads ---------------------------------------------------------------

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        try:
            with self._session_factory() as session:
                row = session.get(Document, (collection, doc_id))
                data = copy.deepcopy(row.data) if row is not None else None
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to read {collection}/{doc_id}") from exc
        return DocumentSnapshot(collection, doc_id, data)

    def query(self, query: Query) -> list[DocumentSnapshot]:
        return query.apply(self._scan(query.collection))

    def _scan(self, collection: str) -> list[DocumentSnapshot]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(select(Document).where(Document.collection == collection)).all()
                return [DocumentSnapshot(collection, row.id, copy.deepcopy(row.data)) for row in rows]
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to scan collection '{collection}'") from exc

    # Writes --------------------------------------------------------------

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        doc_id = new_document_id()
        self._commit([_SetOp(collection, doc_id, dict(data))])
        return doc_id

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], *, merge: bool = False) -> None:
        self._commit([_SetOp(collection, doc_id, dict(data), merge)])

    def update(self, collection: str, doc_id: str, changes: Mapping[str, Any]) -> None:
        self._commit([_UpdateOp(collection, doc_id, dict(changes))])

    def delete(self, collection: str, doc_id: str) -> None:
        self._commit([_DeleteOp(collection, doc_id)])

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def _commit(self, ops: list[_WriteOp]) -> None:
        session = self._session_factory()
        try:
            for op in ops:
                self._apply(session, op)
            session.commit()
        except DocumentNotFoundError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Document store write failed (%d operations)", len(ops))
            raise StoreError("Unable to commit document writes") from exc
        finally:
            session.close()
        self.hub.notify(op.collection for op in ops)

    @staticmethod
    def _apply(session: Session, op: _WriteOp) -> None:
        row = session.get(Document, (op.collection, op.doc_id))
        if isinstance(op, _DeleteOp):
            if row is not None:
                session.delete(row)
                session.flush()
            return
        if isinstance(op, _UpdateOp):
            if row is None:
                raise DocumentNotFoundError(op.collection, op.doc_id)
            row.data = apply_changes(row.data, op.changes)
            session.flush()
            return
        base = row.data if (row is not None and op.merge) else None
        data = apply_changes(base, op.data)
        if row is None:
            session.add(Document(collection=op.collection, id=op.doc_id, data=data))
        else:
            row.data = data
        session.flush()

    # Live subscriptions --------------------------------------------------

    def watch(
        self,
        query: Query,
        on_snapshot: Callable[[QuerySnapshot], None],
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Register a live listener for ``query``.

        ``on_snapshot`` runs immediately with the current matches and again
        after each committed write that changes the result set.
        """

        subscription = Subscription(
            self.hub,
            collection=query.collection,
            fetch=lambda: self.query(query),
            on_snapshot=on_snapshot,
            on_error=on_error,
            query=query,
        )
        self.hub.add(subscription)
        subscription.refresh()
        return subscription

    def watch_document(
        self,
        collection: str,
        doc_id: str,
        on_snapshot: Callable[[DocumentSnapshot], None],
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Register a live listener for a single document, delivered even when missing."""

        def _fetch() -> list[DocumentSnapshot]:
            snapshot = self.get(collection, doc_id)
            return [snapshot] if snapshot.exists else []

        def _deliver(result: QuerySnapshot) -> None:
            on_snapshot(result.documents[0] if result.documents else DocumentSnapshot(collection, doc_id, None))

        subscription = Subscription(
            self.hub,
            collection=collection,
            fetch=_fetch,
            on_snapshot=_deliver,
            on_error=on_error,
        )
        self.hub.add(subscription)
        subscription.refresh()
        return subscription


__all__ = ["DocumentStore", "WriteBatch", "new_document_id"]
