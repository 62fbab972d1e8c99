"""Business logic for follower relationships."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import HTTPException, status

from ..constants import FOLLOWS, USERS
from ..schemas import Follow, NotificationType, UserProfile
from ..store import DocumentNotFoundError, DocumentStore, Query, StoreError, increment
from ..timeutil import now_iso
from .notification_service import add_notification
from .writes import store_errors

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FollowStats:
    user_id: str
    followers_count: int
    following_count: int
    is_following: bool


def edge_query(follower_id: str, following_id: str) -> Query:
    return Query(FOLLOWS).where("follower_id", "==", follower_id).where("following_id", "==", following_id)


def _get_profile_or_404(store: DocumentStore, user_id: str) -> UserProfile:
    with store_errors("Unable to load user"):
        profile = UserProfile.from_snapshot(store.get(USERS, user_id))
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


def _edges(store: DocumentStore, follower_id: str, following_id: str) -> list[Follow]:
    with store_errors("Unable to load follow state"):
        return Follow.from_snapshots(store.query(edge_query(follower_id, following_id)))


def is_following(store: DocumentStore, follower_id: str | None, following_id: str) -> bool:
    if not follower_id:
        return False
    return bool(_edges(store, follower_id, following_id))


def follow_user(store: DocumentStore, *, follower_id: str, target_id: str) -> bool:
    """Create the follow edge, both counters and the notification in one batch.

    Returns ``False`` when the edge already exists.
    """

    if follower_id == target_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot follow yourself")

    _get_profile_or_404(store, target_id)
    if _edges(store, follower_id, target_id):
        return False

    batch = store.batch()
    batch.create(FOLLOWS, {"follower_id": follower_id, "following_id": target_id, "created_at": now_iso()})
    batch.update(USERS, follower_id, {"following_count": increment(1)})
    batch.update(USERS, target_id, {"followers_count": increment(1)})
    add_notification(
        store,
        recipient_id=target_id,
        sender_id=follower_id,
        type_=NotificationType.FOLLOW,
        batch=batch,
    )
    try:
        batch.commit()
    except DocumentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to follow user") from exc
    logger.info("User %s followed %s", follower_id, target_id)
    return True


def unfollow_user(store: DocumentStore, *, follower_id: str, target_id: str) -> bool:
    """Delete every matching edge and decrement both counters in one batch.

    Returns ``False`` when there was nothing to remove.
    """

    if follower_id == target_id:
        return False

    edges = _edges(store, follower_id, target_id)
    if not edges:
        return False

    batch = store.batch()
    for edge in edges:
        batch.delete(FOLLOWS, edge.id)
    batch.update(USERS, follower_id, {"following_count": increment(-1)})
    batch.update(USERS, target_id, {"followers_count": increment(-1)})
    with store_errors("Unable to unfollow user"):
        batch.commit()
    logger.info("User %s unfollowed %s", follower_id, target_id)
    return True


def get_follow_stats(store: DocumentStore, *, user_id: str, viewer_id: str | None = None) -> FollowStats:
    """Report the denormalized counters stored on the profile."""

    profile = _get_profile_or_404(store, user_id)
    return FollowStats(
        user_id=user_id,
        followers_count=profile.followers_count,
        following_count=profile.following_count,
        is_following=is_following(store, viewer_id, user_id),
    )


__all__ = ["FollowStats", "edge_query", "is_following", "follow_user", "unfollow_user", "get_follow_stats"]
