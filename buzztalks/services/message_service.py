"""Business logic for direct conversations and messages."""
from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..constants import CONVERSATIONS, IMAGE_MESSAGE_PREVIEW, IMAGE_NOTIFICATION_PREVIEW, MESSAGES, USERS
from ..schemas import Conversation, ConversationResponse, Message, NotificationType
from ..store import DocumentStore, Query
from ..timeutil import now_iso
from .aggregation import unread_counts_by_conversation
from .enrichment import fetch_profiles, summarize_profile
from .notification_service import add_notification, preview
from .writes import follow_up, store_errors

logger = logging.getLogger(__name__)


def conversations_query(user_id: str) -> Query:
    return (
        Query(CONVERSATIONS)
        .where("participants", "array-contains", user_id)
        .order_by("last_message_at", descending=True)
    )


def messages_query(conversation_id: str) -> Query:
    return Query(MESSAGES).where("conversation_id", "==", conversation_id).order_by("created_at")


def get_conversation(store: DocumentStore, conversation_id: str, *, user_id: str) -> Conversation:
    """Return the conversation when ``user_id`` participates in it, else 404."""

    with store_errors("Unable to load conversation"):
        conversation = Conversation.from_snapshot(store.get(CONVERSATIONS, conversation_id))
    if conversation is None or user_id not in conversation.participants:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    return conversation


def create_or_get_conversation(store: DocumentStore, *, user_id: str, other_user_id: str) -> Conversation:
    """Reuse the existing conversation between the two users or start a new one."""

    if other_user_id == user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot message yourself")

    with store_errors("Unable to load conversations"):
        if not store.get(USERS, other_user_id).exists:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        existing = Conversation.from_snapshots(
            store.query(Query(CONVERSATIONS).where("participants", "array-contains", user_id))
        )
    for conversation in existing:
        if other_user_id in conversation.participants:
            return conversation

    timestamp = now_iso()
    conversation = Conversation(
        id="",
        participants=[user_id, other_user_id],
        last_message="",
        last_message_at=timestamp,
        last_sender_id="",
        created_at=timestamp,
    )
    with store_errors("Unable to start conversation"):
        conversation_id = store.add(CONVERSATIONS, conversation.to_document())
    logger.info("Conversation %s started between %s and %s", conversation_id, user_id, other_user_id)
    return conversation.model_copy(update={"id": conversation_id})


def send_message(
    store: DocumentStore,
    *,
    conversation_id: str,
    sender_id: str,
    content: str = "",
    media_url: str | None = None,
) -> Message:
    """Store a message, refresh the conversation summary and notify the recipient."""

    content = (content or "").strip()
    if not content and not media_url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message cannot be empty")

    conversation = get_conversation(store, conversation_id, user_id=sender_id)
    media_only = bool(media_url) and not content

    message = Message(
        id="",
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        media_url=media_url or None,
        read=False,
        created_at=now_iso(),
    )
    with store_errors("Unable to send message"):
        message_id = store.add(MESSAGES, message.to_document())

    with follow_up("conversation summary update", "Unable to send message"):
        store.update(
            CONVERSATIONS,
            conversation_id,
            {
                "last_message": IMAGE_MESSAGE_PREVIEW if media_only else content,
                "last_message_at": now_iso(),
                "last_sender_id": sender_id,
            },
        )

    recipient_id = conversation.other_participant(sender_id)
    if recipient_id:
        with follow_up("message notification", "Unable to send message"):
            add_notification(
                store,
                recipient_id=recipient_id,
                sender_id=sender_id,
                type_=NotificationType.MESSAGE,
                content=IMAGE_NOTIFICATION_PREVIEW if media_only else preview(content),
            )
    return message.model_copy(update={"id": message_id})


def mark_conversation_read(store: DocumentStore, messages: list[Message], *, user_id: str) -> int:
    """Flip ``read`` on every incoming unread message in one batch."""

    unread = [message for message in messages if message.sender_id != user_id and not message.read]
    if not unread:
        return 0
    batch = store.batch()
    for message in unread:
        batch.update(MESSAGES, message.id, {"read": True})
    with store_errors("Unable to mark messages as read"):
        batch.commit()
    return len(unread)


def list_messages(store: DocumentStore, *, conversation_id: str, user_id: str, mark_read: bool = True) -> list[Message]:
    """Return the conversation history oldest first, marking incoming messages read."""

    get_conversation(store, conversation_id, user_id=user_id)
    with store_errors("Unable to load messages"):
        messages = Message.from_snapshots(store.query(messages_query(conversation_id)))
    if mark_read and mark_conversation_read(store, messages, user_id=user_id):
        messages = [
            message.model_copy(update={"read": True}) if message.sender_id != user_id else message
            for message in messages
        ]
    return messages


def build_conversation_responses(
    store: DocumentStore,
    conversations: list[Conversation],
    *,
    user_id: str,
) -> list[ConversationResponse]:
    """Attach the other participant and per-conversation unread counts."""

    others = {conversation.id: conversation.other_participant(user_id) for conversation in conversations}
    profiles = fetch_profiles(store, others.values())
    with store_errors("Unable to load conversations"):
        unread = unread_counts_by_conversation(store, others, user_id)
    return [
        ConversationResponse(
            **conversation.model_dump(),
            other_user=summarize_profile(profiles.get(others[conversation.id] or ""), others[conversation.id])
            if others[conversation.id]
            else None,
            unread_count=unread.get(conversation.id, 0),
        )
        for conversation in conversations
    ]


def list_conversations(store: DocumentStore, user_id: str) -> list[ConversationResponse]:
    with store_errors("Unable to load conversations"):
        conversations = Conversation.from_snapshots(store.query(conversations_query(user_id)))
    return build_conversation_responses(store, conversations, user_id=user_id)


__all__ = [
    "conversations_query",
    "messages_query",
    "get_conversation",
    "create_or_get_conversation",
    "send_message",
    "mark_conversation_read",
    "list_messages",
    "build_conversation_responses",
    "list_conversations",
]
