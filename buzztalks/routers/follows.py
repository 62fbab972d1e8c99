"""Follow management API routes."""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from ..database import get_document_store
from ..schemas import FollowActionResponse, FollowStatsResponse
from ..services import CurrentUser, follow_user, get_current_user, get_follow_stats, get_optional_user, unfollow_user
from ..store import DocumentStore

router = APIRouter(prefix="/follows", tags=["follows"])


@router.post("/{target_id}", response_model=FollowActionResponse, status_code=status.HTTP_201_CREATED)
async def follow_user_endpoint(
    target_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> FollowActionResponse:
    changed = follow_user(store, follower_id=current_user.uid, target_id=target_id)
    stats = get_follow_stats(store, user_id=target_id, viewer_id=current_user.uid)
    return FollowActionResponse(**asdict(stats), status="followed" if changed else "noop")


@router.delete("/{target_id}", response_model=FollowActionResponse)
async def unfollow_user_endpoint(
    target_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> FollowActionResponse:
    changed = unfollow_user(store, follower_id=current_user.uid, target_id=target_id)
    stats = get_follow_stats(store, user_id=target_id, viewer_id=current_user.uid)
    return FollowActionResponse(**asdict(stats), status="unfollowed" if changed else "noop")


@router.get("/{user_id}", response_model=FollowStatsResponse)
async def follow_stats_endpoint(
    user_id: str,
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> FollowStatsResponse:
    stats = get_follow_stats(store, user_id=user_id, viewer_id=viewer.uid if viewer else None)
    return FollowStatsResponse(**asdict(stats))


__all__ = ["router"]
