"""Schemas used by conversation and messaging endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .profiles import AuthorSummary
from .records import Conversation, Message


class ConversationCreate(BaseModel):
    user_id: str = Field(..., min_length=1)


class ConversationResponse(Conversation):
    other_user: AuthorSummary | None = None
    unread_count: int = 0


class ConversationListResponse(BaseModel):
    items: list[ConversationResponse]
    unread_total: int = 0
    selected_id: str | None = None


class MessageSendRequest(BaseModel):
    content: str = Field(default="", max_length=2000)
    media_url: str | None = Field(default=None, max_length=2048)


class MessageListResponse(BaseModel):
    items: list[Message]


__all__ = [
    "ConversationCreate",
    "ConversationResponse",
    "ConversationListResponse",
    "MessageSendRequest",
    "MessageListResponse",
]
