"""Python SDK for the BuzzTalks API."""
from .api import BuzzTalksAPIError, BuzzTalksClient
from .optimistic import OptimisticField, Phase
from .session import AuthSession, SessionContext
from .state import FeedState, PostCardState

__all__ = [
    "BuzzTalksAPIError",
    "BuzzTalksClient",
    "OptimisticField",
    "Phase",
    "AuthSession",
    "SessionContext",
    "FeedState",
    "PostCardState",
]
