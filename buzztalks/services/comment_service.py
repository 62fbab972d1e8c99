"""Business logic for comments and threaded replies."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..constants import COMMENTS, POSTS
from ..schemas import Comment, CommentResponse, LikeStateResponse, NotificationType
from ..store import DocumentStore, Query, array_remove, array_union
from ..timeutil import now_iso
from .aggregation import thread_comments
from .enrichment import enrich, summarize_profile
from .notification_service import add_notification, preview
from .post_service import get_post
from .writes import adjust_counter, follow_up, store_errors

logger = logging.getLogger(__name__)


def comments_query(post_id: str) -> Query:
    return Query(COMMENTS).where("post_id", "==", post_id).order_by("created_at")


def get_comment(store: DocumentStore, comment_id: str) -> Comment:
    with store_errors("Unable to load comment"):
        comment = Comment.from_snapshot(store.get(COMMENTS, comment_id))
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


def _validate_parent(store: DocumentStore, post_id: str, parent_id: str) -> None:
    with store_errors("Unable to load comment"):
        parent = Comment.from_snapshot(store.get(COMMENTS, parent_id))
    if parent is None or parent.post_id != post_id or parent.parent_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Replies must target a top-level comment on the same post",
        )


def add_comment(
    store: DocumentStore,
    *,
    post_id: str,
    author_id: str,
    content: str,
    parent_id: str | None = None,
) -> Comment:
    """Add a comment, bump ``comments_count`` and notify the post author."""

    content = content.strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment cannot be empty")

    post = get_post(store, post_id)
    if parent_id:
        _validate_parent(store, post_id, parent_id)

    comment = Comment(
        id="",
        post_id=post_id,
        author_id=author_id,
        content=content,
        parent_id=parent_id,
        created_at=now_iso(),
    )
    with store_errors("Unable to add comment"):
        comment_id = store.add(COMMENTS, comment.to_document())

    adjust_counter(store, POSTS, post_id, "comments_count", 1, detail="Unable to add comment")
    with follow_up("comment notification", "Unable to add comment"):
        add_notification(
            store,
            recipient_id=post.author_id,
            sender_id=author_id,
            type_=NotificationType.COMMENT,
            post_id=post_id,
            comment_id=comment_id,
            content=preview(content),
        )
    return comment.model_copy(update={"id": comment_id})


def set_comment_like(
    store: DocumentStore,
    *,
    comment_id: str,
    user_id: str,
    should_like: bool | None = None,
) -> LikeStateResponse:
    comment = get_comment(store, comment_id)
    liked = user_id in comment.likes
    target = (not liked) if should_like is None else should_like

    with store_errors("Unable to like comment"):
        store.update(COMMENTS, comment_id, {"likes": array_union(user_id) if target else array_remove(user_id)})

    likes = set(comment.likes)
    if target:
        likes.add(user_id)
    else:
        likes.discard(user_id)
    return LikeStateResponse(id=comment_id, liked=target, like_count=len(likes))


def delete_comment(store: DocumentStore, *, comment_id: str, user_id: str) -> None:
    comment = get_comment(store, comment_id)
    if comment.author_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author can delete this comment")

    with store_errors("Unable to delete comment"):
        replies = [] if comment.parent_id else store.query(Query(COMMENTS).where("parent_id", "==", comment_id))
        batch = store.batch()
        batch.delete(COMMENTS, comment_id)
        for reply in replies:
            batch.delete(COMMENTS, reply.id)
        batch.commit()
    removed = 1 + len(replies)
    adjust_counter(store, POSTS, comment.post_id, "comments_count", -removed, detail="Unable to delete comment")
    if replies:
        logger.info("Deleted comment %s with %d replies", comment_id, len(replies))


def list_comments(store: DocumentStore, post_id: str) -> list[Comment]:
    with store_errors("Unable to load comments"):
        return Comment.from_snapshots(store.query(comments_query(post_id)))


def build_thread(store: DocumentStore, comments: list[Comment]) -> list[CommentResponse]:
    """Enrich ``comments`` and nest direct replies under their top-level comment."""

    summaries = {
        comment.id: summarize_profile(profile, comment.author_id)
        for comment, profile in enrich(store, comments, lambda item: item.author_id)
    }

    def _response(comment: Comment, replies: list[CommentResponse] | None = None) -> CommentResponse:
        return CommentResponse(
            **comment.model_dump(),
            author=summaries[comment.id],
            like_count=len(comment.likes),
            replies=replies or [],
        )

    return [
        _response(comment, [_response(reply) for reply in replies])
        for comment, replies in thread_comments(comments).nested()
    ]


def comment_thread(store: DocumentStore, post_id: str) -> list[CommentResponse]:
    return build_thread(store, list_comments(store, post_id))


__all__ = [
    "comments_query",
    "get_comment",
    "add_comment",
    "set_comment_like",
    "delete_comment",
    "list_comments",
    "build_thread",
    "comment_thread",
]
