"""SDK session handling and optimistic state, driven through the in-process app."""
from __future__ import annotations

import httpx
import pytest
from fastapi.testclient import TestClient

from buzztalks.client import (
    AuthSession,
    BuzzTalksAPIError,
    BuzzTalksClient,
    FeedState,
    OptimisticField,
    Phase,
    PostCardState,
)


def test_optimistic_field_phases() -> None:
    field = OptimisticField(3)
    field.apply(4)
    assert (field.value, field.confirmed, field.phase) == (4, 3, Phase.PENDING)

    field.rollback()
    assert (field.value, field.pending) == (3, False)

    field.apply(5)
    field.reconcile(7)
    assert (field.value, field.confirmed, field.phase) == (7, 7, Phase.CONFIRMED)


def test_session_observers_track_sign_in_and_out(client: TestClient) -> None:
    sdk = BuzzTalksClient(http=client)
    seen: list[AuthSession | None] = []
    remove = sdk.session.observe(seen.append)

    session = sdk.sign_up("dana@example.com", "password123", "dana")
    assert sdk.session_info()["user_id"] == session.user_id
    sdk.sign_out()

    assert seen == [None, session, None]
    assert not sdk.session.is_authenticated

    remove()
    sdk.sign_in("dana@example.com", "password123")
    assert len(seen) == 3


def test_sdk_round_trip(client: TestClient) -> None:
    author = BuzzTalksClient(http=client)
    author.sign_up("erin@example.com", "password123", "erin")
    post = author.create_post(media_url="https://img.example/e.jpg", caption="#hello world")

    fan = BuzzTalksClient(http=client)
    fan.sign_up("finn@example.com", "password123", "finn")
    assert fan.like_post(post["id"])["liked"] is True
    fan.add_comment(post["id"], "nice")
    fan.follow(author.session.user_id)

    unread = author.notification_summary()["unread_count"]
    assert unread == 3
    assert author.mark_all_notifications_read()["unread_count"] == 0

    with pytest.raises(BuzzTalksAPIError) as forbidden:
        fan.delete_post(post["id"])
    assert forbidden.value.status_code == 403


def test_like_rolls_back_when_server_rejects() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "Unable to like post"})

    sdk = BuzzTalksClient(http=httpx.Client(transport=httpx.MockTransport(_handler), base_url="http://test"))
    card = PostCardState("p1", liked=False, like_count=4)

    with pytest.raises(BuzzTalksAPIError) as failure:
        card.toggle_like(sdk)

    assert failure.value.detail == "Unable to like post"
    assert (card.liked.value, card.like_count.value) == (False, 4)
    assert not card.liked.pending


def test_like_reconciles_with_server_count() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "p1", "liked": True, "like_count": 10})

    sdk = BuzzTalksClient(http=httpx.Client(transport=httpx.MockTransport(_handler), base_url="http://test"))
    card = PostCardState("p1", liked=False, like_count=4)

    assert card.toggle_like(sdk) is True
    assert card.like_count.value == 10
    assert card.like_count.phase is Phase.CONFIRMED


def test_feed_delete_restores_item_on_failure() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"detail": "Only the author can delete this post"})

    sdk = BuzzTalksClient(http=httpx.Client(transport=httpx.MockTransport(_handler), base_url="http://test"))
    feed = FeedState([{"id": "a"}, {"id": "b"}])

    with pytest.raises(BuzzTalksAPIError):
        feed.delete_post(sdk, "a")

    assert feed.post_ids == ["a", "b"]


def test_feed_delete_hides_item_on_success() -> None:
    requests: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(f"{request.method} {request.url.path}")
        return httpx.Response(204)

    sdk = BuzzTalksClient(http=httpx.Client(transport=httpx.MockTransport(_handler), base_url="http://test"))
    feed = FeedState([{"id": "a"}, {"id": "b"}])
    feed.delete_post(sdk, "b", collection="reels")

    assert feed.post_ids == ["a"]
    assert not feed.items.pending
    assert requests == ["DELETE /reels/b"]


def test_post_card_snapshot_uses_viewer_membership() -> None:
    card = PostCardState.from_post({"id": "p1", "likes": ["u1", "u2"], "like_count": 2}, "u2")
    assert (card.liked.value, card.like_count.value) == (True, 2)

    card.apply_snapshot({"id": "p1", "likes": ["u1"]}, "u2")
    assert (card.liked.value, card.like_count.value) == (False, 1)
