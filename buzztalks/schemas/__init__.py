"""Convenience exports for schema layer."""
from .auth import AuthResponse, SessionResponse, SignInRequest, SignUpRequest
from .follow import FollowActionResponse, FollowStatsResponse
from .media import MediaUploadResponse
from .messages import (
    ConversationCreate,
    ConversationListResponse,
    ConversationResponse,
    MessageListResponse,
    MessageSendRequest,
)
from .notifications import NotificationListResponse, NotificationResponse, NotificationSummaryResponse
from .posts import (
    CommentCreate,
    CommentResponse,
    CommentThreadResponse,
    FeedResponse,
    HashtagCount,
    LikeRequest,
    LikeStateResponse,
    PostResponse,
    SearchResponse,
)
from .profiles import AuthorSummary, ProfileUpdateRequest, SuggestionListResponse
from .records import (
    Comment,
    Conversation,
    Follow,
    MediaType,
    Message,
    Notification,
    NotificationType,
    Post,
    Record,
    Story,
    UserProfile,
)
from .stories import StoryBucket, StoryCreate, StoryFeedResponse

__all__ = [
    "AuthResponse",
    "SessionResponse",
    "SignInRequest",
    "SignUpRequest",
    "FollowActionResponse",
    "FollowStatsResponse",
    "MediaUploadResponse",
    "ConversationCreate",
    "ConversationListResponse",
    "ConversationResponse",
    "MessageListResponse",
    "MessageSendRequest",
    "NotificationListResponse",
    "NotificationResponse",
    "NotificationSummaryResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentThreadResponse",
    "FeedResponse",
    "HashtagCount",
    "LikeRequest",
    "LikeStateResponse",
    "PostResponse",
    "SearchResponse",
    "AuthorSummary",
    "ProfileUpdateRequest",
    "SuggestionListResponse",
    "Comment",
    "Conversation",
    "Follow",
    "MediaType",
    "Message",
    "Notification",
    "NotificationType",
    "Post",
    "Record",
    "Story",
    "UserProfile",
    "StoryBucket",
    "StoryCreate",
    "StoryFeedResponse",
]
