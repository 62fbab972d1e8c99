"""Notification API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..database import get_document_store
from ..schemas import Notification, NotificationListResponse, NotificationSummaryResponse
from ..services import CurrentUser, count_unread, get_current_user, list_notifications, mark_all_read, mark_read
from ..store import DocumentStore

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications_endpoint(
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationListResponse:
    return NotificationListResponse(
        items=list_notifications(store, current_user.uid),
        unread_count=count_unread(store, current_user.uid),
    )


@router.get("/summary", response_model=NotificationSummaryResponse)
async def notification_summary_endpoint(
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationSummaryResponse:
    return NotificationSummaryResponse(unread_count=count_unread(store, current_user.uid))


@router.post("/read-all", response_model=NotificationSummaryResponse)
async def mark_all_read_endpoint(
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> NotificationSummaryResponse:
    mark_all_read(store, current_user.uid)
    return NotificationSummaryResponse(unread_count=count_unread(store, current_user.uid))


@router.post("/{notification_id}/read", response_model=Notification)
async def mark_read_endpoint(
    notification_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Notification:
    return mark_read(store, user_id=current_user.uid, notification_id=notification_id)


__all__ = ["router"]
