"""Story routes: the active story tray, posting and view tracking."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from ..database import get_document_store
from ..schemas import Story, StoryCreate, StoryFeedResponse
from ..services import CurrentUser, get_current_user, story_service
from ..store import DocumentStore

router = APIRouter(prefix="/stories", tags=["stories"])


@router.get("", response_model=StoryFeedResponse)
async def list_stories_endpoint(
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> StoryFeedResponse:
    """Unexpired stories grouped by author."""

    return StoryFeedResponse(items=story_service.story_feed(store))


@router.post("", response_model=Story, status_code=status.HTTP_201_CREATED)
async def create_story_endpoint(
    payload: StoryCreate,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Story:
    return story_service.add_story(
        store,
        author_id=current_user.uid,
        media_url=payload.media_url,
        media_type=payload.media_type,
    )


@router.post("/{story_id}/view", status_code=status.HTTP_204_NO_CONTENT)
async def view_story_endpoint(
    story_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Response:
    story_service.view_story(store, story_id=story_id, viewer_id=current_user.uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
