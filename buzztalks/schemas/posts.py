"""Pydantic schemas for posts, reels, comments and search results."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .profiles import AuthorSummary
from .records import Comment, Post, UserProfile


class PostResponse(Post):
    """A post joined with its author and the viewer's like state."""

    author: AuthorSummary
    like_count: int = 0
    viewer_has_liked: bool = False


class FeedResponse(BaseModel):
    items: list[PostResponse]


class LikeRequest(BaseModel):
    """Explicit like state; omitted means toggle the current state."""

    should_like: bool | None = None


class LikeStateResponse(BaseModel):
    id: str
    liked: bool
    like_count: int


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=500)
    parent_id: str | None = None


class CommentResponse(Comment):
    author: AuthorSummary
    like_count: int = 0
    replies: list["CommentResponse"] = Field(default_factory=list)


class CommentThreadResponse(BaseModel):
    items: list[CommentResponse]
    total: int = 0


class HashtagCount(BaseModel):
    tag: str
    count: int


class SearchResponse(BaseModel):
    users: list[UserProfile]
    hashtags: list[HashtagCount]


CommentResponse.model_rebuild()


__all__ = [
    "PostResponse",
    "FeedResponse",
    "LikeRequest",
    "LikeStateResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentThreadResponse",
    "HashtagCount",
    "SearchResponse",
]
