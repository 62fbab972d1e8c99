"""Business logic for posts and reels."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..constants import POST_COLLECTIONS, POSTS, REELS, USERS
from ..schemas import LikeStateResponse, MediaType, NotificationType, Post, PostResponse
from ..store import DocumentStore, Query, array_remove, array_union
from ..timeutil import now_iso
from .aggregation import extract_hashtags, rank_by_likes, unique_hashtags
from .enrichment import enrich, summarize_profile
from .notification_service import add_notification
from .writes import adjust_counter, follow_up, store_errors

logger = logging.getLogger(__name__)


def collection_for(media_type: MediaType | str) -> str:
    """Videos are published as reels, everything else as posts."""

    return REELS if MediaType(media_type) is MediaType.VIDEO else POSTS


def _check_collection(collection: str) -> str:
    if collection not in POST_COLLECTIONS:
        raise ValueError(f"Unsupported post collection '{collection}'")
    return collection


def feed_query(*, limit: int | None = None) -> Query:
    query = Query(POSTS).order_by("created_at", descending=True)
    return query.limit_to(limit) if limit else query


def reels_query() -> Query:
    return Query(REELS).order_by("created_at", descending=True)


def user_posts_query(user_id: str) -> Query:
    return Query(POSTS).where("author_id", "==", user_id).order_by("created_at", descending=True)


def hashtag_query(tag: str) -> Query:
    return (
        Query(POSTS)
        .where("hashtags", "array-contains", tag.strip().lstrip("#").lower())
        .order_by("created_at", descending=True)
    )


def create_post(
    store: DocumentStore,
    *,
    author_id: str,
    media_url: str,
    media_type: MediaType | str,
    caption: str = "",
    location: str | None = None,
) -> Post:
    """Publish a post (image) or reel (video) and bump the author's ``posts_count``."""

    media_type = MediaType(media_type)
    collection = collection_for(media_type)
    caption = (caption or "").strip()
    post = Post(
        id="",
        author_id=author_id,
        media_url=media_url,
        media_type=media_type,
        caption=caption,
        hashtags=unique_hashtags(extract_hashtags(caption)),
        location=(location or "").strip() or None,
        created_at=now_iso(),
    )
    with store_errors("Unable to create post"):
        post_id = store.add(collection, post.to_document())

    adjust_counter(store, USERS, author_id, "posts_count", 1, detail="Unable to create post")
    logger.info("User %s published %s/%s", author_id, collection, post_id)
    return post.model_copy(update={"id": post_id})


def get_post(store: DocumentStore, post_id: str, *, collection: str = POSTS) -> Post:
    with store_errors("Unable to load post"):
        post = Post.from_snapshot(store.get(_check_collection(collection), post_id))
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def set_like(
    store: DocumentStore,
    *,
    post_id: str,
    user_id: str,
    should_like: bool | None = None,
    collection: str = POSTS,
) -> LikeStateResponse:
    """Set the viewer's like state; ``None`` toggles the current state.

    A new like notifies the author unless the author is the viewer.
    """

    post = get_post(store, post_id, collection=collection)
    currently_liked = post.is_liked_by(user_id)
    target = (not currently_liked) if should_like is None else should_like

    change = array_union(user_id) if target else array_remove(user_id)
    with store_errors("Unable to like post" if target else "Unable to unlike post"):
        store.update(collection, post_id, {"likes": change})

    if target and not currently_liked:
        with follow_up("like notification", "Unable to like post"):
            add_notification(
                store,
                recipient_id=post.author_id,
                sender_id=user_id,
                type_=NotificationType.LIKE,
                post_id=post_id,
            )

    likes = set(post.likes)
    if target:
        likes.add(user_id)
    else:
        likes.discard(user_id)
    return LikeStateResponse(id=post_id, liked=target, like_count=len(likes))


def delete_post(store: DocumentStore, *, post_id: str, user_id: str, collection: str = POSTS) -> None:
    """Delete a post or reel owned by ``user_id`` and decrement ``posts_count``."""

    post = get_post(store, post_id, collection=collection)
    if post.author_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author can delete this post")

    with store_errors("Unable to delete post"):
        store.delete(collection, post_id)
    adjust_counter(store, USERS, user_id, "posts_count", -1, detail="Unable to delete post")
    logger.info("User %s deleted %s/%s", user_id, collection, post_id)


def to_responses(store: DocumentStore, posts: list[Post], viewer_id: str | None = None) -> list[PostResponse]:
    """Join author summaries and the viewer's like state onto ``posts``."""

    return [
        PostResponse(
            **post.model_dump(),
            author=summarize_profile(profile, post.author_id),
            like_count=post.total_likes,
            viewer_has_liked=post.is_liked_by(viewer_id),
        )
        for post, profile in enrich(store, posts, lambda item: item.author_id)
    ]


def _load(store: DocumentStore, query: Query) -> list[Post]:
    with store_errors("Unable to load posts"):
        return Post.from_snapshots(store.query(query))


def list_feed(store: DocumentStore, viewer_id: str | None = None, *, limit: int | None = None) -> list[PostResponse]:
    return to_responses(store, _load(store, feed_query(limit=limit)), viewer_id)


def list_reels(store: DocumentStore, viewer_id: str | None = None) -> list[PostResponse]:
    return to_responses(store, _load(store, reels_query()), viewer_id)


def list_user_posts(store: DocumentStore, user_id: str, viewer_id: str | None = None) -> list[PostResponse]:
    return to_responses(store, _load(store, user_posts_query(user_id)), viewer_id)


def explore(store: DocumentStore, hashtag: str | None = None, viewer_id: str | None = None) -> list[PostResponse]:
    """Posts tagged ``hashtag`` newest first, or every post ranked by likes."""

    if hashtag and hashtag.strip().lstrip("#"):
        posts = _load(store, hashtag_query(hashtag))
    else:
        posts = rank_by_likes(_load(store, feed_query()))
    return to_responses(store, posts, viewer_id)


def get_post_response(
    store: DocumentStore, post_id: str, viewer_id: str | None = None, *, collection: str = POSTS
) -> PostResponse:
    return to_responses(store, [get_post(store, post_id, collection=collection)], viewer_id)[0]


__all__ = [
    "collection_for",
    "feed_query",
    "reels_query",
    "user_posts_query",
    "hashtag_query",
    "create_post",
    "get_post",
    "get_post_response",
    "set_like",
    "delete_post",
    "to_responses",
    "list_feed",
    "list_reels",
    "list_user_posts",
    "explore",
]
