"""Document store reads, writes, transforms, batches and query evaluation."""
from __future__ import annotations

import pytest

from buzztalks.store import (
    DocumentNotFoundError,
    DocumentStore,
    InvalidQueryError,
    Query,
    array_remove,
    array_union,
    increment,
)


def test_add_get_and_merge_set(store: DocumentStore) -> None:
    doc_id = store.add("posts", {"caption": "hello", "likes": []})

    snapshot = store.get("posts", doc_id)
    assert snapshot.exists
    assert snapshot.to_dict() == {"caption": "hello", "likes": [], "id": doc_id}

    store.set("posts", doc_id, {"location": "Paris"}, merge=True)
    assert store.get("posts", doc_id).data == {"caption": "hello", "likes": [], "location": "Paris"}

    store.set("posts", doc_id, {"caption": "replaced"})
    assert store.get("posts", doc_id).data == {"caption": "replaced"}


def test_missing_document_reads_as_not_existing(store: DocumentStore) -> None:
    snapshot = store.get("posts", "nope")
    assert not snapshot.exists
    assert snapshot.get("caption", "fallback") == "fallback"


def test_transforms_increment_and_array_ops(store: DocumentStore) -> None:
    store.set("users", "u1", {"followers_count": 2, "likes": ["a"]})

    store.update("users", "u1", {"followers_count": increment(-1), "likes": array_union("b", "a")})
    assert store.get("users", "u1").data == {"followers_count": 1, "likes": ["a", "b"]}

    store.update("users", "u1", {"likes": array_remove("a"), "posts_count": increment(1)})
    assert store.get("users", "u1").data == {"followers_count": 1, "likes": ["b"], "posts_count": 1}


def test_update_missing_document_raises(store: DocumentStore) -> None:
    with pytest.raises(DocumentNotFoundError):
        store.update("users", "ghost", {"followers_count": increment(1)})
    assert not store.get("users", "ghost").exists


def test_batch_is_all_or_nothing(store: DocumentStore) -> None:
    store.set("users", "a", {"following_count": 0})

    batch = store.batch()
    edge_id = batch.create("follows", {"follower_id": "a", "following_id": "b"})
    batch.update("users", "a", {"following_count": increment(1)})
    batch.update("users", "b", {"followers_count": increment(1)})
    with pytest.raises(DocumentNotFoundError):
        batch.commit()

    assert not store.get("follows", edge_id).exists
    assert store.get("users", "a").data == {"following_count": 0}


def test_batch_commit_applies_every_write(store: DocumentStore) -> None:
    store.set("messages", "m1", {"read": False})
    store.set("messages", "m2", {"read": False})

    batch = store.batch()
    batch.update("messages", "m1", {"read": True})
    batch.update("messages", "m2", {"read": True})
    batch.delete("messages", "missing-is-fine")
    batch.commit()

    assert store.get("messages", "m1").data["read"] is True
    assert store.get("messages", "m2").data["read"] is True


def test_query_filters_order_and_limit(store: DocumentStore) -> None:
    store.set("posts", "p1", {"author_id": "a", "created_at": "2024-01-01T00:00:00.000000+00:00", "hashtags": ["sun"]})
    store.set("posts", "p2", {"author_id": "b", "created_at": "2024-01-03T00:00:00.000000+00:00", "hashtags": []})
    store.set("posts", "p3", {"author_id": "a", "created_at": "2024-01-02T00:00:00.000000+00:00", "hashtags": ["sun"]})
    store.set("posts", "p4", {"author_id": "a"})

    newest_first = Query("posts").order_by("created_at", descending=True)
    assert [doc.id for doc in store.query(newest_first)] == ["p2", "p3", "p1"]
    assert [doc.id for doc in store.query(newest_first.limit_to(2))] == ["p2", "p3"]

    by_author = Query("posts").where("author_id", "==", "a").order_by("created_at")
    assert [doc.id for doc in store.query(by_author)] == ["p1", "p3"]

    tagged = Query("posts").where("hashtags", "array-contains", "sun")
    assert {doc.id for doc in store.query(tagged)} == {"p1", "p3"}


def test_query_operators_require_matching_types() -> None:
    data = {"read": False, "count": 3, "name": "x"}
    assert Query("c").where("read", "==", False).matches(data)
    assert not Query("c").where("read", "==", 0).matches(data)
    assert Query("c").where("count", ">=", 3).matches(data)
    assert not Query("c").where("count", ">", "2").matches(data)
    assert not Query("c").where("missing", "!=", "x").matches(data)
    assert Query("c").where("name", "in", ["x", "y"]).matches(data)

    with pytest.raises(InvalidQueryError):
        Query("c").where("name", "in", "x")
    with pytest.raises(InvalidQueryError):
        Query("c").where("name", "~", "x")
