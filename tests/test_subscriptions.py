"""Live query subscriptions: delivery, change sets, teardown and error state."""
from __future__ import annotations

from sqlalchemy.exc import OperationalError

from buzztalks.database import SessionLocal
from buzztalks.services.live_views import LiveView, ViewDefinition
from buzztalks.store import ChangeType, ConnectionState, DocumentStore, Query, QuerySnapshot


def test_initial_snapshot_then_changes(store: DocumentStore) -> None:
    store.set("posts", "p1", {"created_at": "2024-01-01T00:00:00.000000+00:00"})
    received: list[QuerySnapshot] = []

    subscription = store.watch(Query("posts").order_by("created_at", descending=True), received.append)
    assert subscription.state is ConnectionState.LIVE
    assert [snap.ids for snap in received] == [["p1"]]

    store.set("posts", "p2", {"created_at": "2024-01-02T00:00:00.000000+00:00"})
    assert received[-1].ids == ["p2", "p1"]
    assert [(change.type, change.document.id) for change in received[-1].changes] == [(ChangeType.ADDED, "p2")]

    store.delete("posts", "p1")
    assert received[-1].ids == ["p2"]
    assert received[-1].changes[0].type is ChangeType.REMOVED

    subscription.unsubscribe()


def test_unrelated_writes_do_not_redeliver(store: DocumentStore) -> None:
    received: list[QuerySnapshot] = []
    store.watch(Query("posts").where("author_id", "==", "a"), received.append)

    store.add("posts", {"author_id": "b"})
    store.add("comments", {"post_id": "x"})
    assert len(received) == 1


def test_unsubscribe_stops_delivery(store: DocumentStore) -> None:
    received: list[QuerySnapshot] = []
    subscription = store.watch(Query("notifications"), received.append)

    subscription.unsubscribe()
    store.add("notifications", {"user_id": "u"})

    assert len(received) == 1
    assert subscription.state is ConnectionState.CLOSED
    assert store.hub.count() == 0


def test_listeners_are_independent(store: DocumentStore) -> None:
    first: list[QuerySnapshot] = []
    second: list[QuerySnapshot] = []
    sub_a = store.watch(Query("stories"), first.append)
    store.watch(Query("stories"), second.append)

    sub_a.unsubscribe()
    store.add("stories", {"author_id": "u"})

    assert len(first) == 1
    assert len(second) == 2


def test_listener_exception_does_not_break_writes(store: DocumentStore) -> None:
    def _explode(_snapshot: QuerySnapshot) -> None:
        raise RuntimeError("listener bug")

    store.watch(Query("posts"), _explode)
    doc_id = store.add("posts", {"caption": "still saved"})

    assert store.get("posts", doc_id).exists


def _flaky_store() -> tuple[DocumentStore, dict[str, bool]]:
    broken = {"value": False}

    def _factory():
        if broken["value"]:
            raise OperationalError("SELECT", {}, Exception("database is gone"))
        return SessionLocal()

    return DocumentStore(_factory), broken


def test_failed_refresh_reports_errored_state() -> None:
    store, broken = _flaky_store()
    received: list[QuerySnapshot] = []
    errors: list[Exception] = []
    subscription = store.watch(Query("posts"), received.append, errors.append)
    assert subscription.state is ConnectionState.LIVE

    broken["value"] = True
    subscription.refresh()
    assert subscription.state is ConnectionState.ERRORED
    assert len(errors) == 1

    broken["value"] = False
    subscription.refresh()
    assert subscription.state is ConnectionState.LIVE
    assert len(received) == 2
    assert received[-1].ids == []


def test_live_view_announces_recovery_with_unchanged_data() -> None:
    store, broken = _flaky_store()
    events: list[tuple[str, object]] = []
    definition = ViewDefinition(name="counter", render=lambda docs: {"n": len(docs)}, query=Query("posts"))
    view = LiveView(
        store,
        definition,
        lambda payload: events.append(("payload", payload)),
        lambda _exc, state: events.append(("error", state.value)),
    ).start()

    broken["value"] = True
    store.hub.notify(["posts"])
    assert view.state is ConnectionState.ERRORED

    broken["value"] = False
    store.hub.notify(["posts"])

    assert events == [("payload", {"n": 0}), ("error", "errored"), ("payload", {"n": 0})]
    assert view.state is ConnectionState.LIVE
    view.close()


def test_listener_writing_to_its_own_collection_is_requeued(store: DocumentStore) -> None:
    store.set("messages", "m1", {"read": False})
    seen: list[list[bool]] = []

    def _mark_read(snapshot: QuerySnapshot) -> None:
        seen.append([doc.data["read"] for doc in snapshot])
        for doc in snapshot:
            if not doc.data["read"]:
                store.update("messages", doc.id, {"read": True})

    store.watch(Query("messages"), _mark_read)

    assert seen == [[False], [True]]
