"""Typed records for each document collection, validated and defaulted on read."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..store import DocumentSnapshot
from ..timeutil import to_iso


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def from_content_type(cls, content_type: str | None) -> "MediaType":
        return cls.VIDEO if (content_type or "").lower().startswith("video/") else cls.IMAGE


class NotificationType(StrEnum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    MESSAGE = "message"
    MENTION = "mention"


class Record(BaseModel):
    """Base class for documents read from the store."""

    model_config = ConfigDict(extra="ignore")

    id: str

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot) -> Self | None:
        if not snapshot.exists:
            return None
        return cls.model_validate(snapshot.to_dict())

    @classmethod
    def from_snapshots(cls, snapshots: list[DocumentSnapshot]) -> list[Self]:
        return [cls.model_validate(snapshot.to_dict()) for snapshot in snapshots if snapshot.exists]

    def to_document(self) -> dict[str, Any]:
        """Return the storable fields, with timestamps in canonical ISO form."""

        data = self.model_dump(mode="python", exclude={"id"})
        return {key: to_iso(value) if isinstance(value, datetime) else _plain(value) for key, value in data.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, StrEnum):
        return value.value
    return value


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class UserProfile(Record):
    username: str = ""
    email: str | None = None
    avatar_url: str = ""
    bio: str = ""
    website: str | None = None
    location: str | None = None
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    created_at: datetime | None = None

    @field_validator("username", "avatar_url", "bio", mode="before")
    @classmethod
    def _blank_strings(cls, value: Any) -> Any:
        return "" if value is None else value


class Post(Record):
    """An image post or a reel; both collections share this shape."""

    author_id: str
    media_url: str = ""
    media_type: MediaType = MediaType.IMAGE
    caption: str = ""
    hashtags: list[str] = Field(default_factory=list)
    location: str | None = None
    likes: list[str] = Field(default_factory=list)
    comments_count: int = 0
    created_at: datetime | None = None

    coerce_lists = field_validator("hashtags", "likes", mode="before")(_none_to_list)

    @property
    def total_likes(self) -> int:
        return len(self.likes)

    def is_liked_by(self, user_id: str | None) -> bool:
        return bool(user_id) and user_id in self.likes


class Comment(Record):
    post_id: str
    author_id: str
    content: str = ""
    parent_id: str | None = None
    likes: list[str] = Field(default_factory=list)
    created_at: datetime | None = None

    coerce_lists = field_validator("likes", mode="before")(_none_to_list)

    @field_validator("parent_id", mode="before")
    @classmethod
    def _empty_parent(cls, value: Any) -> Any:
        return value or None


class Story(Record):
    author_id: str
    media_url: str
    media_type: MediaType = MediaType.IMAGE
    viewed_by: list[str] = Field(default_factory=list)
    created_at: datetime
    expires_at: datetime

    coerce_lists = field_validator("viewed_by", mode="before")(_none_to_list)

    def is_active(self, *, reference: datetime) -> bool:
        return reference < self.expires_at


class Follow(Record):
    follower_id: str
    following_id: str
    created_at: datetime | None = None


class Conversation(Record):
    participants: list[str] = Field(default_factory=list)
    last_message: str = ""
    last_message_at: datetime | None = None
    last_sender_id: str = ""
    created_at: datetime | None = None

    coerce_lists = field_validator("participants", mode="before")(_none_to_list)

    def other_participant(self, user_id: str) -> str | None:
        return next((participant for participant in self.participants if participant != user_id), None)


class Message(Record):
    conversation_id: str
    sender_id: str
    content: str = ""
    media_url: str | None = None
    read: bool = False
    created_at: datetime | None = None


class Notification(Record):
    user_id: str
    from_user_id: str
    type: NotificationType
    post_id: str | None = None
    comment_id: str | None = None
    content: str | None = None
    read: bool = False
    created_at: datetime | None = None


__all__ = [
    "MediaType",
    "NotificationType",
    "Record",
    "UserProfile",
    "Post",
    "Comment",
    "Story",
    "Follow",
    "Conversation",
    "Message",
    "Notification",
]
