"""Post routes: publishing, likes, deletion and comment threads."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from ..constants import POSTS
from ..database import get_document_store
from ..schemas import (
    CommentCreate,
    CommentResponse,
    CommentThreadResponse,
    LikeRequest,
    LikeStateResponse,
    MediaType,
    PostResponse,
)
from ..services import CurrentUser, get_current_user, get_optional_user
from ..services import comment_service, post_service
from ..services.enrichment import fetch_profiles, summarize_profile
from ..store import DocumentStore
from .uploads import resolve_media

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
    caption: str = Form(""),
    location: str | None = Form(None),
    media_url: str | None = Form(None),
    media_type: MediaType | None = Form(None),
    file: UploadFile | None = File(None),
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> PostResponse:
    """Publish a post from ``multipart/form-data``.

    Supply either ``file`` (uploaded to the media host) or a hosted
    ``media_url``. Videos are stored as reels.
    """

    url, resolved_type = await resolve_media(file, media_url, media_type)
    post = post_service.create_post(
        store,
        author_id=current_user.uid,
        media_url=url,
        media_type=resolved_type,
        caption=caption,
        location=location,
    )
    return post_service.to_responses(store, [post], current_user.uid)[0]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post_endpoint(
    post_id: str,
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> PostResponse:
    return post_service.get_post_response(store, post_id, viewer.uid if viewer else None)


@router.post("/{post_id}/like", response_model=LikeStateResponse)
async def like_post_endpoint(
    post_id: str,
    payload: LikeRequest | None = None,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> LikeStateResponse:
    """Set the like state explicitly, or toggle it when ``should_like`` is omitted."""

    should_like = payload.should_like if payload else None
    return post_service.set_like(
        store, post_id=post_id, user_id=current_user.uid, should_like=should_like, collection=POSTS
    )


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post_endpoint(
    post_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Response:
    post_service.delete_post(store, post_id=post_id, user_id=current_user.uid, collection=POSTS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}/comments", response_model=CommentThreadResponse)
async def list_comments_endpoint(
    post_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> CommentThreadResponse:
    comments = comment_service.list_comments(store, post_id)
    return CommentThreadResponse(items=comment_service.build_thread(store, comments), total=len(comments))


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment_endpoint(
    post_id: str,
    payload: CommentCreate,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> CommentResponse:
    comment = comment_service.add_comment(
        store,
        post_id=post_id,
        author_id=current_user.uid,
        content=payload.content,
        parent_id=payload.parent_id,
    )
    profile = fetch_profiles(store, [current_user.uid]).get(current_user.uid)
    return CommentResponse(
        **comment.model_dump(),
        author=summarize_profile(profile, current_user.uid),
        like_count=0,
    )


__all__ = ["router"]
