"""Pydantic schemas for ephemeral stories."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .profiles import AuthorSummary
from .records import MediaType, Story


class StoryCreate(BaseModel):
    media_url: str = Field(..., min_length=1, max_length=2048)
    media_type: MediaType = MediaType.IMAGE


class StoryBucket(BaseModel):
    author: AuthorSummary
    stories: list[Story]


class StoryFeedResponse(BaseModel):
    items: list[StoryBucket]


__all__ = ["StoryCreate", "StoryBucket", "StoryFeedResponse"]
