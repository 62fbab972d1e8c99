"""Schemas for media uploads."""
from __future__ import annotations

from pydantic import BaseModel

from .records import MediaType


class MediaUploadResponse(BaseModel):
    url: str
    media_type: MediaType


__all__ = ["MediaUploadResponse"]
