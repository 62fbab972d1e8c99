"""Aggregate router exports."""
from .auth import router as auth_router
from .comments import router as comments_router
from .feed import router as feed_router
from .follows import router as follows_router
from .messages import router as messages_router
from .notifications import router as notifications_router
from .posts import router as posts_router
from .profiles import router as profiles_router
from .realtime import router as realtime_router
from .reels import router as reels_router
from .stories import router as stories_router
from .uploads import router as uploads_router

__all__ = [
    "auth_router",
    "comments_router",
    "feed_router",
    "follows_router",
    "messages_router",
    "notifications_router",
    "posts_router",
    "profiles_router",
    "realtime_router",
    "reels_router",
    "stories_router",
    "uploads_router",
]
