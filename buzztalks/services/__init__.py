"""Convenience exports for service layer."""
from .aggregation import (
    CommentThread,
    count_unread_messages,
    extract_hashtags,
    group_stories_by_author,
    rank_by_likes,
    search_hashtags,
    search_users,
    thread_comments,
    unique_hashtags,
    unread_counts_by_conversation,
)
from .auth_service import CurrentUser, get_current_user, get_optional_user, sign_in, sign_out, sign_up
from .enrichment import enrich, fetch_profiles, summarize_profile
from .follow_service import FollowStats, follow_user, get_follow_stats, unfollow_user
from .live_views import LiveView, LiveViewError, watch_view
from .media_service import MediaConfigurationError, MediaUploadError, upload_media
from .notification_service import add_notification, count_unread, list_notifications, mark_all_read, mark_read
from .stream import ViewStreamManager, view_stream_manager

__all__ = [
    "CommentThread",
    "count_unread_messages",
    "extract_hashtags",
    "group_stories_by_author",
    "rank_by_likes",
    "search_hashtags",
    "search_users",
    "thread_comments",
    "unique_hashtags",
    "unread_counts_by_conversation",
    "CurrentUser",
    "get_current_user",
    "get_optional_user",
    "sign_in",
    "sign_out",
    "sign_up",
    "enrich",
    "fetch_profiles",
    "summarize_profile",
    "FollowStats",
    "follow_user",
    "get_follow_stats",
    "unfollow_user",
    "LiveView",
    "LiveViewError",
    "watch_view",
    "MediaConfigurationError",
    "MediaUploadError",
    "upload_media",
    "add_notification",
    "count_unread",
    "list_notifications",
    "mark_all_read",
    "mark_read",
    "ViewStreamManager",
    "view_stream_manager",
]
