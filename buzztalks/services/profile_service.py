"""Profile documents: defaults, updates and follow suggestions."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..config import get_settings
from ..constants import AVATAR_URL_TEMPLATE, USERS
from ..schemas import AuthorSummary, ProfileUpdateRequest, UserProfile
from ..store import DocumentStore, Query
from ..timeutil import now_iso
from .enrichment import summarize_profile
from .writes import store_errors

logger = logging.getLogger(__name__)


def default_avatar_url(seed: str) -> str:
    return AVATAR_URL_TEMPLATE.format(seed=seed)


def new_profile_document(*, username: str, email: str | None, avatar_seed: str | None = None) -> dict:
    """Fields written for a freshly created profile, counters zeroed."""

    return {
        "username": username,
        "email": email,
        "avatar_url": default_avatar_url(avatar_seed or username),
        "bio": "",
        "website": "",
        "location": "",
        "followers_count": 0,
        "following_count": 0,
        "posts_count": 0,
        "created_at": now_iso(),
    }


def get_profile(store: DocumentStore, user_id: str) -> UserProfile:
    with store_errors("Unable to load profile"):
        profile = UserProfile.from_snapshot(store.get(USERS, user_id))
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


def ensure_profile(store: DocumentStore, *, user_id: str, email: str | None) -> UserProfile:
    """Return the caller's profile, creating a default one when it is missing."""

    with store_errors("Unable to load profile"):
        snapshot = store.get(USERS, user_id)
    if snapshot.exists:
        return UserProfile.from_snapshot(snapshot)

    username = (email or "").split("@")[0] or "user"
    data = new_profile_document(username=username, email=email, avatar_seed=user_id)
    with store_errors("Unable to create profile"):
        store.set(USERS, user_id, data)
    logger.info("Created default profile for %s", user_id)
    return UserProfile.model_validate({"id": user_id, **data})


def update_profile(store: DocumentStore, *, user_id: str, payload: ProfileUpdateRequest) -> UserProfile:
    """Merge the supplied fields into the profile document."""

    changes = {
        key: value.strip() if isinstance(value, str) else value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }
    if changes:
        with store_errors("Unable to update profile"):
            store.set(USERS, user_id, changes, merge=True)
    return get_profile(store, user_id)


def set_avatar(store: DocumentStore, *, user_id: str, avatar_url: str) -> UserProfile:
    with store_errors("Unable to update avatar"):
        store.set(USERS, user_id, {"avatar_url": avatar_url}, merge=True)
    return get_profile(store, user_id)


def suggestions(store: DocumentStore, *, user_id: str, limit: int | None = None) -> list[AuthorSummary]:
    """Other users to follow, capped at ``SUGGESTIONS_LIMIT``."""

    limit = limit or get_settings().suggestions_limit
    with store_errors("Unable to load suggestions"):
        snapshots = store.query(Query(USERS))
    profiles = [profile for profile in UserProfile.from_snapshots(snapshots) if profile.id != user_id]
    return [summarize_profile(profile, profile.id) for profile in profiles[:limit]]


__all__ = [
    "default_avatar_url",
    "new_profile_document",
    "get_profile",
    "ensure_profile",
    "update_profile",
    "set_avatar",
    "suggestions",
]
