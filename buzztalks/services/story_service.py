"""Ephemeral stories: creation, visibility window and view tracking."""
from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import HTTPException, status

from ..config import get_settings
from ..constants import STORIES
from ..schemas import MediaType, Story, StoryBucket
from ..store import DocumentStore, Query, array_union
from ..timeutil import to_iso, utcnow
from .aggregation import group_stories_by_author
from .enrichment import fetch_profiles, summarize_profile
from .writes import store_errors


def story_ttl() -> timedelta:
    return timedelta(hours=get_settings().story_ttl_hours)


def active_stories_query(now: datetime | None = None) -> Query:
    """Stories whose ``expires_at`` is still in the future, newest first."""

    reference = to_iso(now or utcnow())
    return (
        Query(STORIES)
        .where("expires_at", ">", reference)
        .order_by("expires_at", descending=True)
    )


def add_story(
    store: DocumentStore,
    *,
    author_id: str,
    media_url: str,
    media_type: MediaType | str = MediaType.IMAGE,
    now: datetime | None = None,
) -> Story:
    created_at = now or utcnow()
    story = Story(
        id="",
        author_id=author_id,
        media_url=media_url,
        media_type=MediaType(media_type),
        created_at=created_at,
        expires_at=created_at + story_ttl(),
    )
    with store_errors("Unable to add story"):
        story_id = store.add(STORIES, story.to_document())
    return story.model_copy(update={"id": story_id})


def view_story(store: DocumentStore, *, story_id: str, viewer_id: str) -> None:
    with store_errors("Unable to load story"):
        exists = store.get(STORIES, story_id).exists
    if not exists:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Story not found")
    with store_errors("Unable to record story view"):
        store.update(STORIES, story_id, {"viewed_by": array_union(viewer_id)})


def list_active_stories(store: DocumentStore, now: datetime | None = None) -> list[Story]:
    with store_errors("Unable to load stories"):
        return Story.from_snapshots(store.query(active_stories_query(now)))


def build_buckets(store: DocumentStore, stories: list[Story]) -> list[StoryBucket]:
    """Group stories per author (first-seen order) with the author summary attached."""

    grouped = group_stories_by_author(stories)
    profiles = fetch_profiles(store, grouped)
    return [
        StoryBucket(author=summarize_profile(profiles.get(author_id), author_id), stories=items)
        for author_id, items in grouped.items()
    ]


def story_feed(store: DocumentStore, now: datetime | None = None) -> list[StoryBucket]:
    return build_buckets(store, list_active_stories(store, now))


__all__ = [
    "story_ttl",
    "active_stories_query",
    "add_story",
    "view_story",
    "list_active_stories",
    "build_buckets",
    "story_feed",
]
