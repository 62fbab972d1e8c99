"""Join author/user profiles onto fetched records with one read per distinct user."""
from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from ..constants import FALLBACK_AVATAR_URL, FALLBACK_USERNAME, USERS
from ..schemas import AuthorSummary, UserProfile
from ..store import DocumentStore

T = TypeVar("T")


def fetch_profiles(store: DocumentStore, user_ids: Iterable[str | None]) -> dict[str, UserProfile | None]:
    """Point-read each distinct, non-empty user id once.

    Ids whose profile no longer exists map to ``None``.
    """

    profiles: dict[str, UserProfile | None] = {}
    for user_id in dict.fromkeys(user_id for user_id in user_ids if user_id):
        profiles[user_id] = UserProfile.from_snapshot(store.get(USERS, user_id))
    return profiles


def enrich(
    store: DocumentStore,
    records: Iterable[T],
    key: Callable[[T], str | None],
) -> list[tuple[T, UserProfile | None]]:
    """Pair every record with the profile referenced by ``key(record)``."""

    items = list(records)
    profiles = fetch_profiles(store, (key(item) for item in items))
    return [(item, profiles.get(key(item) or "")) for item in items]


def summarize_profile(profile: UserProfile | None, user_id: str | None) -> AuthorSummary:
    """Return display fields for a profile, falling back to defaults when missing."""

    if profile is None:
        return AuthorSummary(id=user_id or "", username=FALLBACK_USERNAME, avatar_url=FALLBACK_AVATAR_URL)
    return AuthorSummary(
        id=profile.id,
        username=profile.username or FALLBACK_USERNAME,
        avatar_url=profile.avatar_url or FALLBACK_AVATAR_URL,
    )


__all__ = ["fetch_profiles", "enrich", "summarize_profile"]
