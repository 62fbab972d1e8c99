"""Project-wide constant values."""
from __future__ import annotations

USERS = "users"
POSTS = "posts"
REELS = "reels"
COMMENTS = "comments"
STORIES = "stories"
FOLLOWS = "follows"
CONVERSATIONS = "conversations"
MESSAGES = "messages"
NOTIFICATIONS = "notifications"

ALL_COLLECTIONS = (USERS, POSTS, REELS, COMMENTS, STORIES, FOLLOWS, CONVERSATIONS, MESSAGES, NOTIFICATIONS)
POST_COLLECTIONS = (POSTS, REELS)

NOTIFICATION_PREVIEW_CHARS = 100

IMAGE_MESSAGE_PREVIEW = "📸 Image"
IMAGE_NOTIFICATION_PREVIEW = "📸 Sent you an image"

# Display fallbacks for records whose referenced profile no longer exists.
FALLBACK_USERNAME = "Unknown"
FALLBACK_AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed=default"
AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"

__all__ = [
    "USERS",
    "POSTS",
    "REELS",
    "COMMENTS",
    "STORIES",
    "FOLLOWS",
    "CONVERSATIONS",
    "MESSAGES",
    "NOTIFICATIONS",
    "ALL_COLLECTIONS",
    "POST_COLLECTIONS",
    "NOTIFICATION_PREVIEW_CHARS",
    "IMAGE_MESSAGE_PREVIEW",
    "IMAGE_NOTIFICATION_PREVIEW",
    "FALLBACK_USERNAME",
    "FALLBACK_AVATAR_URL",
    "AVATAR_URL_TEMPLATE",
]
