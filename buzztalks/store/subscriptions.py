"""Live query listeners and the hub that refreshes them after committed writes."""
from __future__ import annotations

import logging
import threading
from enum import StrEnum
from typing import Callable, Iterable
from uuid import uuid4

from .errors import StoreError
from .query import Query
from .snapshot import DocumentSnapshot, QuerySnapshot, diff_documents

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[QuerySnapshot], None]
ErrorCallback = Callable[[Exception], None]


class ConnectionState(StrEnum):
    CONNECTING = "connecting"
    LIVE = "live"
    ERRORED = "errored"
    CLOSED = "closed"


class Subscription:
    """A standing listener that re-delivers a query result whenever it changes."""

    def __init__(
        self,
        hub: "SubscriptionHub",
        *,
        collection: str,
        fetch: Callable[[], list[DocumentSnapshot]],
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
        query: Query | None = None,
    ) -> None:
        self.id = uuid4().hex
        self.collection = collection
        self.query = query
        self._hub = hub
        self._fetch = fetch
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._state = ConnectionState.CONNECTING
        self._previous: list[DocumentSnapshot] | None = None
        self._lock = threading.Lock()
        self._delivering = False
        self._pending = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state is not ConnectionState.CLOSED

    def refresh(self) -> None:
        """Re-run the query and deliver a snapshot when the result set changed.

        After an errored refresh the next successful one always delivers, so
        listeners learn the stream is live again.

        A refresh requested while this subscription is already delivering (for
        example when the listener writes to its own collection) is queued and
        runs once the current delivery returns.
        """

        with self._lock:
            if self._state is ConnectionState.CLOSED:
                return
            if self._delivering:
                self._pending = True
                return
            self._delivering = True
        try:
            while True:
                self._refresh_once()
                with self._lock:
                    if not self._pending or self._state is ConnectionState.CLOSED:
                        self._delivering = False
                        return
                    self._pending = False
        except BaseException:
            with self._lock:
                self._delivering = False
            raise

    def _refresh_once(self) -> None:
        try:
            documents = self._fetch()
        except StoreError as exc:
            self._fail(exc)
            return

        first_delivery = self._previous is None
        changes = diff_documents(self._previous, documents)
        reordered = not first_delivery and [doc.id for doc in self._previous or []] != [doc.id for doc in documents]
        recovered = self._state is ConnectionState.ERRORED
        if self._state is ConnectionState.CLOSED:
            return
        self._state = ConnectionState.LIVE
        if recovered:
            logger.info("Subscription %s on '%s' recovered", self.id, self.collection)
        elif not (first_delivery or changes or reordered):
            return

        self._previous = documents
        try:
            self._on_snapshot(QuerySnapshot(self.query, documents, changes))
        except Exception:
            logger.exception("Snapshot listener %s on '%s' raised", self.id, self.collection)

    def _fail(self, exc: StoreError) -> None:
        self._state = ConnectionState.ERRORED
        if self._on_error is None:
            logger.error("Subscription %s on '%s' failed: %s", self.id, self.collection, exc)
            return
        try:
            self._on_error(exc)
        except Exception:
            logger.exception("Error listener %s on '%s' raised", self.id, self.collection)

    def unsubscribe(self) -> None:
        """Stop receiving snapshots and release the listener."""

        with self._lock:
            if self._state is ConnectionState.CLOSED:
                return
            self._state = ConnectionState.CLOSED
        self._hub.discard(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class SubscriptionHub:
    """Tracks active subscriptions per collection and refreshes them on change."""

    def __init__(self) -> None:
        self._by_collection: dict[str, set[Subscription]] = {}
        self._lock = threading.RLock()

    def add(self, subscription: Subscription) -> None:
        with self._lock:
            self._by_collection.setdefault(subscription.collection, set()).add(subscription)

    def discard(self, subscription: Subscription) -> None:
        with self._lock:
            group = self._by_collection.get(subscription.collection)
            if group is None:
                return
            group.discard(subscription)
            if not group:
                self._by_collection.pop(subscription.collection, None)

    def notify(self, collections: Iterable[str]) -> None:
        """Refresh every subscription watching one of ``collections``."""

        with self._lock:
            targets: list[Subscription] = []
            for name in dict.fromkeys(collections):
                targets.extend(self._by_collection.get(name, ()))
        for subscription in targets:
            subscription.refresh()

    def count(self, collection: str | None = None) -> int:
        with self._lock:
            if collection is not None:
                return len(self._by_collection.get(collection, ()))
            return sum(len(group) for group in self._by_collection.values())

    def close_all(self) -> None:
        with self._lock:
            targets = [sub for group in self._by_collection.values() for sub in group]
        for subscription in targets:
            subscription.unsubscribe()


__all__ = [
    "ConnectionState",
    "SnapshotCallback",
    "ErrorCallback",
    "Subscription",
    "SubscriptionHub",
]
