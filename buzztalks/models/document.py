"""SQLAlchemy ORM model holding schemaless documents grouped by collection."""
from __future__ import annotations

from sqlalchemy import JSON, Column, String
from sqlalchemy.dialects.postgresql import JSONB

from ..database import Base
from .base import TimestampMixin


class Document(TimestampMixin, Base):
    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    id = Column(String(64), primary_key=True)
    data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)


__all__ = ["Document"]
