"""Client-side scan search over profiles and post hashtags."""
from __future__ import annotations

from ..config import get_settings
from ..constants import POSTS, USERS
from ..schemas import Post, SearchResponse, UserProfile
from ..store import DocumentStore, Query
from .aggregation import search_hashtags, search_users
from .writes import store_errors


def search(store: DocumentStore, term: str, *, limit: int | None = None) -> SearchResponse:
    """Match users by username/bio; hashtags are searched only for ``#`` terms."""

    term = (term or "").strip()
    if not term:
        return SearchResponse(users=[], hashtags=[])

    limit = limit or get_settings().search_limit
    with store_errors("Unable to search"):
        users = search_users(UserProfile.from_snapshots(store.query(Query(USERS))), term, limit=limit)
        hashtags = []
        if term.startswith("#"):
            hashtags = search_hashtags(Post.from_snapshots(store.query(Query(POSTS))), term, limit=limit)
    return SearchResponse(users=users, hashtags=hashtags)


__all__ = ["search"]
