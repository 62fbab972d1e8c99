"""Short-video reel routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..constants import REELS
from ..database import get_document_store
from ..schemas import FeedResponse, LikeRequest, LikeStateResponse, PostResponse
from ..services import CurrentUser, get_current_user, get_optional_user, post_service
from ..store import DocumentStore

router = APIRouter(prefix="/reels", tags=["reels"])


@router.get("", response_model=FeedResponse)
async def list_reels_endpoint(
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> FeedResponse:
    return FeedResponse(items=post_service.list_reels(store, viewer.uid if viewer else None))


@router.get("/{reel_id}", response_model=PostResponse)
async def get_reel_endpoint(
    reel_id: str,
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> PostResponse:
    return post_service.get_post_response(store, reel_id, viewer.uid if viewer else None, collection=REELS)


@router.post("/{reel_id}/like", response_model=LikeStateResponse)
async def like_reel_endpoint(
    reel_id: str,
    payload: LikeRequest | None = None,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> LikeStateResponse:
    return post_service.set_like(
        store,
        post_id=reel_id,
        user_id=current_user.uid,
        should_like=payload.should_like if payload else None,
        collection=REELS,
    )


@router.delete("/{reel_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reel_endpoint(
    reel_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Response:
    post_service.delete_post(store, post_id=reel_id, user_id=current_user.uid, collection=REELS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
