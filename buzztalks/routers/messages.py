"""Direct conversation routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from ..database import get_document_store
from ..schemas import (
    ConversationCreate,
    ConversationListResponse,
    ConversationResponse,
    Message,
    MessageListResponse,
    MessageSendRequest,
)
from ..services import CurrentUser, get_current_user, message_service
from ..store import DocumentStore

router = APIRouter(prefix="/conversations", tags=["messages"])


@router.get("", response_model=ConversationListResponse)
async def list_conversations_endpoint(
    conversation: str | None = Query(default=None, description="Conversation to open, for deep links"),
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConversationListResponse:
    """Conversations newest first with unread counts.

    ``selected_id`` echoes ``conversation`` only when the caller participates in it.
    """

    items = message_service.list_conversations(store, current_user.uid)
    selected = conversation if conversation and any(item.id == conversation for item in items) else None
    return ConversationListResponse(
        items=items,
        unread_total=sum(item.unread_count for item in items),
        selected_id=selected,
    )


@router.post("", response_model=ConversationResponse)
async def create_conversation_endpoint(
    payload: ConversationCreate,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> ConversationResponse:
    conversation = message_service.create_or_get_conversation(
        store, user_id=current_user.uid, other_user_id=payload.user_id
    )
    return message_service.build_conversation_responses(store, [conversation], user_id=current_user.uid)[0]


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages_endpoint(
    conversation_id: str,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> MessageListResponse:
    """History oldest first. Opening a conversation marks incoming messages read."""

    messages = message_service.list_messages(store, conversation_id=conversation_id, user_id=current_user.uid)
    return MessageListResponse(items=messages)


@router.post("/{conversation_id}/messages", response_model=Message, status_code=status.HTTP_201_CREATED)
async def send_message_endpoint(
    conversation_id: str,
    payload: MessageSendRequest,
    store: DocumentStore = Depends(get_document_store),
    current_user: CurrentUser = Depends(get_current_user),
) -> Message:
    return message_service.send_message(
        store,
        conversation_id=conversation_id,
        sender_id=current_user.uid,
        content=payload.content,
        media_url=payload.media_url,
    )


__all__ = ["router"]
