"""Comment routes that act on a single comment."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..database import get_document_store
from ..schemas import LikeRequest, LikeStateResponse
from ..services import CurrentUser, comment_service, get_current_user
from ..store import DocumentStore

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/{comment_id}/like", response_model=LikeStateResponse)
async def like_comment_endpoint(
    comment_id: str,
    payload: LikeRequest | None = None,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> LikeStateResponse:
    return comment_service.set_comment_like(
        store,
        comment_id=comment_id,
        user_id=current_user.uid,
        should_like=payload.should_like if payload else None,
    )


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment_endpoint(
    comment_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Response:
    comment_service.delete_comment(store, comment_id=comment_id, user_id=current_user.uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
