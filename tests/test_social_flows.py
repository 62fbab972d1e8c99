"""Multi-document write flows: follows, likes, comments, messages and stories."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from buzztalks.schemas import Notification, NotificationType
from buzztalks.services import (
    comment_service,
    follow_service,
    message_service,
    notification_service,
    post_service,
    profile_service,
    story_service,
)
from buzztalks.services.live_views import watch_view
from buzztalks.store import DocumentStore, Query
from buzztalks.timeutil import utcnow


def _notifications(store: DocumentStore, user_id: str) -> list[Notification]:
    return Notification.from_snapshots(store.query(Query("notifications").where("user_id", "==", user_id)))


@pytest.fixture
def people(store: DocumentStore, seed) -> DocumentStore:
    for user_id in ("alice", "bob", "carol"):
        seed(store, user_id)
    return store


def test_follow_updates_edge_counters_and_notifies(people: DocumentStore) -> None:
    assert follow_service.follow_user(people, follower_id="alice", target_id="bob") is True
    assert follow_service.follow_user(people, follower_id="alice", target_id="bob") is False

    stats = follow_service.get_follow_stats(people, user_id="bob", viewer_id="alice")
    assert (stats.followers_count, stats.following_count, stats.is_following) == (1, 0, True)
    assert profile_service.get_profile(people, "alice").following_count == 1

    notes = _notifications(people, "bob")
    assert [(note.type, note.from_user_id) for note in notes] == [(NotificationType.FOLLOW, "alice")]

    assert follow_service.unfollow_user(people, follower_id="alice", target_id="bob") is True
    stats = follow_service.get_follow_stats(people, user_id="bob", viewer_id="alice")
    assert (stats.followers_count, stats.is_following) == (0, False)
    assert profile_service.get_profile(people, "alice").following_count == 0


def test_follow_rejects_self_and_unknown_users(people: DocumentStore) -> None:
    with pytest.raises(HTTPException) as self_follow:
        follow_service.follow_user(people, follower_id="alice", target_id="alice")
    assert self_follow.value.status_code == 400

    with pytest.raises(HTTPException) as unknown:
        follow_service.follow_user(people, follower_id="alice", target_id="nobody")
    assert unknown.value.status_code == 404


def test_like_toggle_round_trip_notifies_once(people: DocumentStore) -> None:
    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")

    liked = post_service.set_like(people, post_id=post.id, user_id="bob")
    assert (liked.liked, liked.like_count) == (True, 1)

    unliked = post_service.set_like(people, post_id=post.id, user_id="bob")
    assert (unliked.liked, unliked.like_count) == (False, 0)
    assert post_service.get_post(people, post.id).likes == []

    post_service.set_like(people, post_id=post.id, user_id="bob", should_like=True)
    post_service.set_like(people, post_id=post.id, user_id="bob", should_like=True)
    assert post_service.get_post(people, post.id).likes == ["bob"]

    likes = [note for note in _notifications(people, "alice") if note.type is NotificationType.LIKE]
    assert len(likes) == 2


def test_self_like_creates_no_notification(people: DocumentStore) -> None:
    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")
    post_service.set_like(people, post_id=post.id, user_id="alice")

    assert _notifications(people, "alice") == []


def test_create_post_routes_videos_to_reels_and_counts(people: DocumentStore) -> None:
    post = post_service.create_post(
        people,
        author_id="alice",
        media_url="https://img/1.jpg",
        media_type="image",
        caption="Golden hour #Sunset #sunset #beach",
    )
    reel = post_service.create_post(people, author_id="alice", media_url="https://vid/1.mp4", media_type="video")

    assert post.hashtags == ["sunset", "beach"]
    assert people.get("reels", reel.id).exists
    assert not people.get("posts", reel.id).exists
    assert profile_service.get_profile(people, "alice").posts_count == 2

    assert [item.id for item in post_service.explore(people, "#SUNSET")] == [post.id]


def test_delete_post_requires_author(people: DocumentStore) -> None:
    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")

    with pytest.raises(HTTPException) as forbidden:
        post_service.delete_post(people, post_id=post.id, user_id="bob")
    assert forbidden.value.status_code == 403

    post_service.delete_post(people, post_id=post.id, user_id="alice")
    assert not people.get("posts", post.id).exists
    assert profile_service.get_profile(people, "alice").posts_count == 0


def test_deleted_post_leaves_live_feed(people: DocumentStore) -> None:
    payloads: list[dict[str, Any]] = []
    view = watch_view(people, "feed", None, user_id="bob", on_payload=payloads.append)

    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")
    assert [item["id"] for item in payloads[-1]["items"]] == [post.id]
    assert payloads[-1]["items"][0]["author"]["username"] == "alice"

    post_service.delete_post(people, post_id=post.id, user_id="alice")
    assert payloads[-1]["items"] == []
    view.close()


def test_comment_replies_must_target_top_level_comment(people: DocumentStore) -> None:
    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")
    other = post_service.create_post(people, author_id="alice", media_url="https://img/2.jpg", media_type="image")

    top = comment_service.add_comment(people, post_id=post.id, author_id="bob", content="Nice shot")
    reply = comment_service.add_comment(people, post_id=post.id, author_id="carol", content="Agreed", parent_id=top.id)

    for parent_id, target in ((reply.id, post.id), (top.id, other.id), ("missing", post.id)):
        with pytest.raises(HTTPException) as invalid:
            comment_service.add_comment(people, post_id=target, author_id="bob", content="x", parent_id=parent_id)
        assert invalid.value.status_code == 400

    thread = comment_service.comment_thread(people, post.id)
    assert [(item.id, [child.id for child in item.replies]) for item in thread] == [(top.id, [reply.id])]
    assert post_service.get_post(people, post.id).comments_count == 2

    comment_notes = [note for note in _notifications(people, "alice") if note.type is NotificationType.COMMENT]
    assert [note.content for note in comment_notes if note.from_user_id == "bob"] == ["Nice shot"]


def test_empty_comment_is_rejected(people: DocumentStore) -> None:
    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")
    with pytest.raises(HTTPException) as empty:
        comment_service.add_comment(people, post_id=post.id, author_id="bob", content="   ")
    assert empty.value.status_code == 400


def test_deleting_top_level_comment_removes_its_replies(people: DocumentStore) -> None:
    post = post_service.create_post(people, author_id="alice", media_url="https://img/1.jpg", media_type="image")
    top = comment_service.add_comment(people, post_id=post.id, author_id="bob", content="Nice shot")
    comment_service.add_comment(people, post_id=post.id, author_id="carol", content="Agreed", parent_id=top.id)
    keep = comment_service.add_comment(people, post_id=post.id, author_id="carol", content="Second")
    kept_reply = comment_service.add_comment(people, post_id=post.id, author_id="bob", content="Yes", parent_id=keep.id)

    payloads: list[dict[str, Any]] = []
    view = watch_view(people, "comments", {"post_id": post.id}, user_id="alice", on_payload=payloads.append)
    assert payloads[-1]["total"] == 4

    with pytest.raises(HTTPException) as not_author:
        comment_service.delete_comment(people, comment_id=top.id, user_id="alice")
    assert not_author.value.status_code == 403

    comment_service.delete_comment(people, comment_id=top.id, user_id="bob")

    remaining = comment_service.list_comments(people, post.id)
    assert sorted(comment.id for comment in remaining) == sorted([keep.id, kept_reply.id])
    assert post_service.get_post(people, post.id).comments_count == 2
    assert payloads[-1]["total"] == 2
    assert [item["id"] for item in payloads[-1]["items"]] == [keep.id]

    comment_service.delete_comment(people, comment_id=kept_reply.id, user_id="bob")
    assert [comment.id for comment in comment_service.list_comments(people, post.id)] == [keep.id]
    assert post_service.get_post(people, post.id).comments_count == 1
    view.close()


def test_unread_counts_and_mark_read_on_open(people: DocumentStore) -> None:
    conversation = message_service.create_or_get_conversation(people, user_id="alice", other_user_id="bob")
    again = message_service.create_or_get_conversation(people, user_id="bob", other_user_id="alice")
    assert again.id == conversation.id

    message_service.send_message(people, conversation_id=conversation.id, sender_id="alice", content="hi")
    message_service.send_message(people, conversation_id=conversation.id, sender_id="alice", media_url="https://img/x")

    listed = message_service.list_conversations(people, "bob")
    assert [(item.id, item.unread_count) for item in listed] == [(conversation.id, 2)]
    assert listed[0].last_message == "📸 Image"
    assert listed[0].other_user is not None and listed[0].other_user.id == "alice"

    notes = [note.content for note in _notifications(people, "bob") if note.type is NotificationType.MESSAGE]
    assert sorted(notes) == sorted(["hi", "📸 Sent you an image"])

    history = message_service.list_messages(people, conversation_id=conversation.id, user_id="bob")
    assert [message.read for message in history] == [True, True]
    assert message_service.list_conversations(people, "bob")[0].unread_count == 0

    with pytest.raises(HTTPException) as outsider:
        message_service.list_messages(people, conversation_id=conversation.id, user_id="carol")
    assert outsider.value.status_code == 404


def test_notifications_mark_all_read(people: DocumentStore) -> None:
    follow_service.follow_user(people, follower_id="alice", target_id="carol")
    follow_service.follow_user(people, follower_id="bob", target_id="carol")
    assert notification_service.count_unread(people, "carol") == 2

    note = _notifications(people, "carol")[0]
    with pytest.raises(HTTPException) as not_owner:
        notification_service.mark_read(people, notification_id=note.id, user_id="alice")
    assert not_owner.value.status_code == 404

    assert notification_service.mark_all_read(people, "carol") == 2
    assert notification_service.count_unread(people, "carol") == 0


def test_notification_updates_report_store_failures() -> None:
    def _factory():
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    broken = DocumentStore(_factory)
    with pytest.raises(HTTPException) as single:
        notification_service.mark_read(broken, user_id="carol", notification_id="n1")
    assert (single.value.status_code, single.value.detail) == (500, "Unable to update notification")

    with pytest.raises(HTTPException) as bulk:
        notification_service.mark_all_read(broken, "carol")
    assert (bulk.value.status_code, bulk.value.detail) == (500, "Unable to update notifications")


@pytest.mark.parametrize(
    ("age", "visible"),
    [(timedelta(hours=23, minutes=59), True), (timedelta(hours=24, minutes=1), False)],
)
def test_story_visibility_window(people: DocumentStore, age: timedelta, visible: bool) -> None:
    story = story_service.add_story(people, author_id="alice", media_url="https://img/s.jpg", now=utcnow() - age)

    active = [item.id for item in story_service.list_active_stories(people)]
    assert (story.id in active) is visible


def test_story_feed_buckets_by_author_and_tracks_views(people: DocumentStore) -> None:
    now = utcnow()
    first = story_service.add_story(people, author_id="alice", media_url="https://img/a1", now=now - timedelta(hours=2))
    story_service.add_story(people, author_id="bob", media_url="https://img/b1", now=now - timedelta(hours=1))
    story_service.add_story(people, author_id="alice", media_url="https://img/a2", now=now)

    buckets = story_service.story_feed(people)
    assert [bucket.author.id for bucket in buckets] == ["alice", "bob"]
    assert len(buckets[0].stories) == 2

    story_service.view_story(people, story_id=first.id, viewer_id="carol")
    story_service.view_story(people, story_id=first.id, viewer_id="carol")
    assert people.get("stories", first.id).data["viewed_by"] == ["carol"]

    with pytest.raises(HTTPException) as missing:
        story_service.view_story(people, story_id="missing", viewer_id="carol")
    assert missing.value.status_code == 404
