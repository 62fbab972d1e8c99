"""Profile routes under ``/users``."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from ..database import get_document_store
from ..schemas import FeedResponse, ProfileUpdateRequest, SuggestionListResponse, UserProfile
from ..services import CurrentUser, get_current_user, get_optional_user, post_service, profile_service
from ..store import DocumentStore
from .uploads import upload_or_raise

router = APIRouter(prefix="/users", tags=["profiles"])


@router.get("/me", response_model=UserProfile)
async def my_profile_endpoint(
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> UserProfile:
    """Return the caller's profile, creating a default document on first visit."""

    return profile_service.ensure_profile(store, user_id=current_user.uid, email=current_user.email)


@router.patch("/me", response_model=UserProfile)
async def update_profile_endpoint(
    payload: ProfileUpdateRequest,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> UserProfile:
    profile_service.ensure_profile(store, user_id=current_user.uid, email=current_user.email)
    return profile_service.update_profile(store, user_id=current_user.uid, payload=payload)


@router.post("/me/avatar", response_model=UserProfile)
async def upload_avatar_endpoint(
    file: UploadFile = File(...),
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> UserProfile:
    result = await upload_or_raise(file)
    return profile_service.set_avatar(store, user_id=current_user.uid, avatar_url=result.url)


@router.get("/suggestions", response_model=SuggestionListResponse)
async def suggestions_endpoint(
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> SuggestionListResponse:
    return SuggestionListResponse(items=profile_service.suggestions(store, user_id=current_user.uid))


@router.get("/{user_id}", response_model=UserProfile)
async def profile_endpoint(user_id: str, store: DocumentStore = Depends(get_document_store)) -> UserProfile:
    return profile_service.get_profile(store, user_id)


@router.get("/{user_id}/posts", response_model=FeedResponse)
async def user_posts_endpoint(
    user_id: str,
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> FeedResponse:
    return FeedResponse(items=post_service.list_user_posts(store, user_id, viewer.uid if viewer else None))


__all__ = ["router"]
