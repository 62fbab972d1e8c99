"""Shared helpers for multi-step write sequences."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status

from ..store import DocumentNotFoundError, DocumentStore, StoreError, increment

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(detail: str) -> Iterator[None]:
    """Translate store failures raised inside the block into a 500 response."""

    try:
        yield
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from exc


def adjust_counter(
    store: DocumentStore,
    collection: str,
    doc_id: str,
    field: str,
    amount: int,
    *,
    detail: str,
) -> None:
    """Apply ``increment(amount)`` to a denormalized counter after a primary write.

    The primary write is never undone. A missing target document is skipped.
    """

    try:
        store.update(collection, doc_id, {field: increment(amount)})
    except DocumentNotFoundError:
        logger.warning("Skipped %s update on missing document %s/%s", field, collection, doc_id)
    except StoreError as exc:
        logger.warning("Primary write applied but %s update failed on %s/%s", field, collection, doc_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from exc


@contextmanager
def follow_up(action: str, detail: str) -> Iterator[None]:
    """Like :func:`store_errors` for a write that depends on an applied primary write."""

    try:
        yield
    except StoreError as exc:
        logger.warning("Primary write applied but %s failed: %s", action, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail) from exc


__all__ = ["store_errors", "adjust_counter", "follow_up"]
