"""Notification fan-out and read-state helpers."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..config import get_settings
from ..constants import NOTIFICATION_PREVIEW_CHARS, NOTIFICATIONS
from ..schemas import Notification, NotificationResponse, NotificationType
from ..store import DocumentStore, Query, WriteBatch
from ..timeutil import now_iso
from .enrichment import enrich, summarize_profile
from .writes import store_errors

logger = logging.getLogger(__name__)


def preview(text: str | None) -> str:
    return (text or "")[:NOTIFICATION_PREVIEW_CHARS]


def build_notification(
    *,
    recipient_id: str,
    sender_id: str,
    type_: NotificationType,
    post_id: str | None = None,
    comment_id: str | None = None,
    content: str | None = None,
) -> dict:
    return {
        "user_id": recipient_id,
        "from_user_id": sender_id,
        "type": type_.value,
        "post_id": post_id,
        "comment_id": comment_id,
        "content": content,
        "read": False,
        "created_at": now_iso(),
    }


def add_notification(
    store: DocumentStore,
    *,
    recipient_id: str,
    sender_id: str,
    type_: NotificationType,
    post_id: str | None = None,
    comment_id: str | None = None,
    content: str | None = None,
    batch: WriteBatch | None = None,
) -> str | None:
    """Create a notification unless the actor is notifying themselves.

    When ``batch`` is given the write is staged on it instead of committed.
    Returns the new notification id, or ``None`` when suppressed.
    """

    if not recipient_id or recipient_id == sender_id:
        return None

    data = build_notification(
        recipient_id=recipient_id,
        sender_id=sender_id,
        type_=type_,
        post_id=post_id,
        comment_id=comment_id,
        content=content,
    )
    if batch is not None:
        return batch.create(NOTIFICATIONS, data)
    return store.add(NOTIFICATIONS, data)


def notifications_query(user_id: str, *, limit: int | None = None) -> Query:
    query = Query(NOTIFICATIONS).where("user_id", "==", user_id).order_by("created_at", descending=True)
    return query.limit_to(limit or get_settings().notifications_limit)


def unread_notifications_query(user_id: str) -> Query:
    return Query(NOTIFICATIONS).where("user_id", "==", user_id).where("read", "==", False)


def to_responses(store: DocumentStore, notifications: list[Notification]) -> list[NotificationResponse]:
    return [
        NotificationResponse(**notification.model_dump(), from_user=summarize_profile(profile, notification.from_user_id))
        for notification, profile in enrich(store, notifications, lambda item: item.from_user_id)
    ]


def list_notifications(store: DocumentStore, user_id: str, *, limit: int | None = None) -> list[NotificationResponse]:
    """Return the newest notifications for ``user_id`` with sender profiles joined."""

    with store_errors("Unable to load notifications"):
        notifications = Notification.from_snapshots(store.query(notifications_query(user_id, limit=limit)))
    return to_responses(store, notifications)


def count_unread(store: DocumentStore, user_id: str) -> int:
    with store_errors("Unable to load notifications"):
        return len(store.query(unread_notifications_query(user_id)))


def mark_read(store: DocumentStore, *, user_id: str, notification_id: str) -> Notification:
    with store_errors("Unable to update notification"):
        notification = Notification.from_snapshot(store.get(NOTIFICATIONS, notification_id))
    if notification is None or notification.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    if notification.read:
        return notification
    with store_errors("Unable to update notification"):
        store.update(NOTIFICATIONS, notification_id, {"read": True})
    return notification.model_copy(update={"read": True})


def mark_all_read(store: DocumentStore, user_id: str) -> int:
    """Flip every unread notification of ``user_id`` in one batch."""

    with store_errors("Unable to update notifications"):
        unread = store.query(unread_notifications_query(user_id))
        if not unread:
            return 0
        batch = store.batch()
        for snapshot in unread:
            batch.update(NOTIFICATIONS, snapshot.id, {"read": True})
        batch.commit()
    return len(unread)


__all__ = [
    "preview",
    "build_notification",
    "add_notification",
    "notifications_query",
    "unread_notifications_query",
    "to_responses",
    "list_notifications",
    "count_unread",
    "mark_read",
    "mark_all_read",
]
