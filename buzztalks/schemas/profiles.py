"""Schemas for profile endpoints."""
from __future__ import annotations

from pydantic import BaseModel, Field


class AuthorSummary(BaseModel):
    """Display-ready identity joined onto feed records."""

    id: str
    username: str
    avatar_url: str


class ProfileUpdateRequest(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=32)
    bio: str | None = Field(default=None, max_length=500)
    website: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=2048)


class SuggestionListResponse(BaseModel):
    items: list[AuthorSummary]


__all__ = ["AuthorSummary", "ProfileUpdateRequest", "SuggestionListResponse"]
