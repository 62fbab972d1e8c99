"""Client-side view state with optimistic likes and deletes."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from .api import BuzzTalksAPIError, BuzzTalksClient
from .optimistic import OptimisticField

logger = logging.getLogger(__name__)


class PostCardState:
    """Like state for one rendered post or reel."""

    def __init__(self, post_id: str, *, liked: bool = False, like_count: int = 0, collection: str = "posts") -> None:
        self.post_id = post_id
        self.collection = collection
        self.liked = OptimisticField(liked)
        self.like_count = OptimisticField(like_count)

    @classmethod
    def from_post(cls, post: dict[str, Any], viewer_id: str | None, *, collection: str = "posts") -> "PostCardState":
        state = cls(post["id"], collection=collection)
        state.apply_snapshot(post, viewer_id)
        return state

    def toggle_like(self, client: BuzzTalksClient) -> bool:
        """Flip the like locally, then confirm with the server.

        On failure both fields return to their confirmed values and the
        error propagates.
        """

        target = not self.liked.value
        self.liked.apply(target)
        self.like_count.apply(max(0, self.like_count.value + (1 if target else -1)))
        try:
            if self.collection == "reels":
                result = client.like_reel(self.post_id, should_like=target)
            else:
                result = client.like_post(self.post_id, should_like=target)
        except BuzzTalksAPIError:
            logger.info("Like on %s failed; rolling back", self.post_id)
            self.liked.rollback()
            self.like_count.rollback()
            raise
        self.liked.reconcile(bool(result["liked"]))
        self.like_count.reconcile(int(result["like_count"]))
        return self.liked.value

    def apply_snapshot(self, post: dict[str, Any], viewer_id: str | None) -> None:
        likes = post.get("likes") or []
        self.liked.reconcile(bool(viewer_id) and viewer_id in likes)
        self.like_count.reconcile(int(post.get("like_count", len(likes))))


class FeedState:
    """An ordered list of posts where deletes disappear before the server confirms."""

    def __init__(self, items: Iterable[dict[str, Any]] = ()) -> None:
        self.items: OptimisticField[list[dict[str, Any]]] = OptimisticField(list(items))

    @property
    def post_ids(self) -> list[str]:
        return [item["id"] for item in self.items.value]

    def apply_snapshot(self, items: Iterable[dict[str, Any]]) -> None:
        self.items.reconcile(list(items))

    def delete_post(self, client: BuzzTalksClient, post_id: str, *, collection: str = "posts") -> None:
        remaining = [item for item in self.items.value if item["id"] != post_id]
        self.items.apply(remaining)
        try:
            if collection == "reels":
                client.delete_reel(post_id)
            else:
                client.delete_post(post_id)
        except BuzzTalksAPIError:
            logger.info("Delete of %s failed; restoring it", post_id)
            self.items.rollback()
            raise
        self.items.reconcile(remaining)


__all__ = ["PostCardState", "FeedState"]
