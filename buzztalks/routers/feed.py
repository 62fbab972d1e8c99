"""Feed, explore and search routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..database import get_document_store
from ..schemas import FeedResponse, SearchResponse
from ..services import CurrentUser, get_optional_user, post_service, search_service
from ..store import DocumentStore

router = APIRouter(tags=["feed"])


@router.get("/feed", response_model=FeedResponse)
async def feed_endpoint(
    limit: int | None = Query(default=None, ge=1, le=200),
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> FeedResponse:
    return FeedResponse(items=post_service.list_feed(store, viewer.uid if viewer else None, limit=limit))


@router.get("/explore", response_model=FeedResponse)
async def explore_endpoint(
    hashtag: str | None = Query(default=None, max_length=100),
    store: DocumentStore = Depends(get_document_store),
    viewer: CurrentUser | None = Depends(get_optional_user),
) -> FeedResponse:
    """Posts for ``hashtag`` newest first, or all posts ranked by likes."""

    return FeedResponse(items=post_service.explore(store, hashtag, viewer.uid if viewer else None))


@router.get("/search", response_model=SearchResponse)
async def search_endpoint(
    q: str = Query(default="", max_length=100),
    store: DocumentStore = Depends(get_document_store),
) -> SearchResponse:
    return search_service.search(store, q)


__all__ = ["router"]
