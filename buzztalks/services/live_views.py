"""Named live views: watched queries rendered into UI-ready payloads.

A view is one primary query (or a single document) plus optional dependent
queries whose changes only trigger a re-render. Each payload is a plain JSON
compatible ``dict`` so it can be pushed over a WebSocket unchanged.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from fastapi import HTTPException

from ..constants import MESSAGES, POSTS, USERS
from ..schemas import Comment, Conversation, Message, Notification, Post, Story, UserProfile
from ..store import ConnectionState, DocumentSnapshot, DocumentStore, Query, QuerySnapshot, StoreError, Subscription
from ..timeutil import utcnow
from . import comment_service, message_service, notification_service, post_service, story_service

logger = logging.getLogger(__name__)

Payload = dict[str, Any]
PayloadCallback = Callable[[Payload], None]
ViewErrorCallback = Callable[[Exception, ConnectionState], None]
Renderer = Callable[[list[DocumentSnapshot]], Payload]


class LiveViewError(ValueError):
    """Raised for unknown view names or missing view parameters."""


@dataclass(frozen=True)
class ViewDefinition:
    """How to watch and render one named view."""

    name: str
    render: Renderer
    query: Query | None = None
    document: tuple[str, str] | None = None
    also_watch: tuple[Query, ...] = field(default_factory=tuple)


def _dump(models: list[Any]) -> list[dict[str, Any]]:
    return [model.model_dump(mode="json") for model in models]


def _require(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if not value or not isinstance(value, str):
        raise LiveViewError(f"View parameter '{key}' is required")
    return value


def _posts_view(store: DocumentStore, name: str, query: Query, viewer_id: str) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        posts = Post.from_snapshots(documents)
        return {"items": _dump(post_service.to_responses(store, posts, viewer_id))}

    return ViewDefinition(name=name, render=render, query=query)


def _post_view(store: DocumentStore, post_id: str, viewer_id: str) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        posts = Post.from_snapshots(documents)
        responses = post_service.to_responses(store, posts, viewer_id)
        return {"item": responses[0].model_dump(mode="json") if responses else None}

    return ViewDefinition(name="post", render=render, document=(POSTS, post_id))


def _comments_view(store: DocumentStore, post_id: str) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        comments = Comment.from_snapshots(documents)
        return {"items": _dump(comment_service.build_thread(store, comments)), "total": len(comments)}

    return ViewDefinition(name="comments", render=render, query=comment_service.comments_query(post_id))


def _stories_view(store: DocumentStore) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        return {"items": _dump(story_service.build_buckets(store, Story.from_snapshots(documents)))}

    return ViewDefinition(name="stories", render=render, query=story_service.active_stories_query(utcnow()))


def _notifications_view(store: DocumentStore, user_id: str) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        items = notification_service.to_responses(store, Notification.from_snapshots(documents))
        return {"items": _dump(items), "unread_count": notification_service.count_unread(store, user_id)}

    return ViewDefinition(
        name="notifications",
        render=render,
        query=notification_service.notifications_query(user_id),
        also_watch=(notification_service.unread_notifications_query(user_id),),
    )


def _conversations_view(store: DocumentStore, user_id: str) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        conversations = Conversation.from_snapshots(documents)
        items = message_service.build_conversation_responses(store, conversations, user_id=user_id)
        return {"items": _dump(items), "unread_total": sum(item.unread_count for item in items)}

    return ViewDefinition(
        name="conversations",
        render=render,
        query=message_service.conversations_query(user_id),
        also_watch=(Query(MESSAGES).where("read", "==", False),),
    )


def _messages_view(store: DocumentStore, conversation_id: str, user_id: str) -> ViewDefinition:
    message_service.get_conversation(store, conversation_id, user_id=user_id)

    def render(documents: list[DocumentSnapshot]) -> Payload:
        messages = Message.from_snapshots(documents)
        # Writes from here re-enter the subscription as a queued refresh.
        message_service.mark_conversation_read(store, messages, user_id=user_id)
        return {"items": _dump(messages)}

    return ViewDefinition(name="messages", render=render, query=message_service.messages_query(conversation_id))


def _profile_view(user_id: str) -> ViewDefinition:
    def render(documents: list[DocumentSnapshot]) -> Payload:
        profiles = UserProfile.from_snapshots(documents)
        return {"item": profiles[0].model_dump(mode="json") if profiles else None}

    return ViewDefinition(name="profile", render=render, document=(USERS, user_id))


VIEW_NAMES = (
    "feed",
    "reels",
    "user_posts",
    "post",
    "comments",
    "stories",
    "notifications",
    "conversations",
    "messages",
    "profile",
)


def build_view(store: DocumentStore, name: str, params: Mapping[str, Any] | None, *, user_id: str) -> ViewDefinition:
    """Resolve ``name`` and ``params`` for the caller ``user_id``."""

    params = params or {}
    if not isinstance(params, Mapping):
        raise LiveViewError("View parameters must be an object")
    if name == "feed":
        return _posts_view(store, name, post_service.feed_query(), user_id)
    if name == "reels":
        return _posts_view(store, name, post_service.reels_query(), user_id)
    if name == "user_posts":
        return _posts_view(store, name, post_service.user_posts_query(_require(params, "user_id")), user_id)
    if name == "post":
        return _post_view(store, _require(params, "post_id"), user_id)
    if name == "comments":
        return _comments_view(store, _require(params, "post_id"))
    if name == "stories":
        return _stories_view(store)
    if name == "notifications":
        return _notifications_view(store, user_id)
    if name == "conversations":
        return _conversations_view(store, user_id)
    if name == "messages":
        return _messages_view(store, _require(params, "conversation_id"), user_id)
    if name == "profile":
        return _profile_view(params.get("user_id") or user_id)
    raise LiveViewError(f"Unknown view '{name}'")


class LiveView:
    """Keeps a rendered payload current for one :class:`ViewDefinition`."""

    def __init__(
        self,
        store: DocumentStore,
        definition: ViewDefinition,
        on_payload: PayloadCallback,
        on_error: ViewErrorCallback | None = None,
    ) -> None:
        self.store = store
        self.definition = definition
        self._on_payload = on_payload
        self._on_error = on_error
        self._subscriptions: list[Subscription] = []
        self._documents: list[DocumentSnapshot] = []
        self._ready = False
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def state(self) -> ConnectionState:
        states = {subscription.state for subscription in self._subscriptions}
        for candidate in (ConnectionState.ERRORED, ConnectionState.CONNECTING, ConnectionState.LIVE):
            if candidate in states:
                return candidate
        return ConnectionState.CLOSED

    def start(self) -> "LiveView":
        definition = self.definition
        if definition.document is not None:
            collection, doc_id = definition.document
            primary = self.store.watch_document(collection, doc_id, self._on_document, self._handle_error)
        elif definition.query is not None:
            primary = self.store.watch(definition.query, self._on_primary, self._handle_error)
        else:
            raise LiveViewError(f"View '{definition.name}' has nothing to watch")
        self._subscriptions.append(primary)
        for query in definition.also_watch:
            self._subscriptions.append(self.store.watch(query, self._on_dependency, self._handle_error))
        self._ready = True
        return self

    def _on_primary(self, snapshot: QuerySnapshot) -> None:
        with self._lock:
            self._documents = list(snapshot.documents)
        self._emit()

    def _on_document(self, snapshot: DocumentSnapshot) -> None:
        with self._lock:
            self._documents = [snapshot] if snapshot.exists else []
        self._emit()

    def _on_dependency(self, _snapshot: QuerySnapshot) -> None:
        if self._ready:
            self._emit()

    def _emit(self) -> None:
        with self._lock:
            documents = list(self._documents)
        try:
            payload = self.definition.render(documents)
        except (StoreError, HTTPException) as exc:
            self._handle_error(exc)
            return
        self._on_payload(payload)

    def _handle_error(self, exc: Exception) -> None:
        logger.warning("Live view '%s' errored: %s", self.name, exc)
        if self._on_error is not None:
            self._on_error(exc, ConnectionState.ERRORED)

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()


def watch_view(
    store: DocumentStore,
    name: str,
    params: Mapping[str, Any] | None,
    *,
    user_id: str,
    on_payload: PayloadCallback,
    on_error: ViewErrorCallback | None = None,
) -> LiveView:
    """Build and start the named view. The first payload is delivered before returning."""

    return LiveView(store, build_view(store, name, params, user_id=user_id), on_payload, on_error).start()


__all__ = [
    "LiveViewError",
    "ViewDefinition",
    "LiveView",
    "VIEW_NAMES",
    "build_view",
    "watch_view",
]
