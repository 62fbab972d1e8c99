"""SQLAlchemy ORM models backing the email/password auth provider."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from ..database import Base


def _new_uid() -> str:
    return uuid.uuid4().hex


class Account(Base):
    __tablename__ = "accounts"

    uid = Column(String(64), primary_key=True, default=_new_uid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)


class RevokedToken(Base):
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    uid = Column(String(64), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


__all__ = ["Account", "RevokedToken"]
