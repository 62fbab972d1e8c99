"""Convenience exports for ORM models."""
from .account import Account, RevokedToken
from .document import Document

__all__ = ["Account", "Document", "RevokedToken"]
