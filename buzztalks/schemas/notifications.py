"""Schemas for notifications."""
from __future__ import annotations

from pydantic import BaseModel

from .profiles import AuthorSummary
from .records import Notification


class NotificationResponse(Notification):
    from_user: AuthorSummary


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    unread_count: int = 0


class NotificationSummaryResponse(BaseModel):
    unread_count: int = 0


__all__ = ["NotificationResponse", "NotificationListResponse", "NotificationSummaryResponse"]
