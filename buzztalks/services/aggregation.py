"""Pure helpers that aggregate already-fetched records."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from ..constants import MESSAGES
from ..schemas import Comment, HashtagCount, Post, Story, UserProfile
from ..store import DocumentStore, Query

HASHTAG_PATTERN = re.compile(r"#(\w+)")


def extract_hashtags(text: str | None) -> list[str]:
    """Return lower-cased hashtag bodies in first-seen order, duplicates kept."""

    return [match.lower() for match in HASHTAG_PATTERN.findall(text or "")]


def unique_hashtags(tags: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(tags))


@dataclass(slots=True)
class CommentThread:
    top_level: list[Comment] = field(default_factory=list)
    replies: dict[str, list[Comment]] = field(default_factory=dict)

    def replies_to(self, comment_id: str) -> list[Comment]:
        return self.replies.get(comment_id, [])

    def nested(self) -> Iterator[tuple[Comment, list[Comment]]]:
        """Yield each top-level comment with its direct replies, one level deep."""

        for comment in self.top_level:
            yield comment, self.replies_to(comment.id)


def thread_comments(comments: Iterable[Comment]) -> CommentThread:
    thread = CommentThread()
    for comment in comments:
        if comment.parent_id:
            thread.replies.setdefault(comment.parent_id, []).append(comment)
        else:
            thread.top_level.append(comment)
    return thread


def group_stories_by_author(stories: Iterable[Story]) -> dict[str, list[Story]]:
    grouped: dict[str, list[Story]] = {}
    for story in stories:
        grouped.setdefault(story.author_id, []).append(story)
    return grouped


def unread_messages_query(conversation_id: str, user_id: str) -> Query:
    return (
        Query(MESSAGES)
        .where("conversation_id", "==", conversation_id)
        .where("read", "==", False)
        .where("sender_id", "!=", user_id)
    )


def unread_counts_by_conversation(
    store: DocumentStore,
    conversation_ids: Iterable[str],
    user_id: str,
) -> dict[str, int]:
    """Count unread incoming messages with one query per conversation."""

    return {
        conversation_id: len(store.query(unread_messages_query(conversation_id, user_id)))
        for conversation_id in dict.fromkeys(conversation_ids)
    }


def count_unread_messages(store: DocumentStore, conversation_ids: Iterable[str], user_id: str) -> int:
    return sum(unread_counts_by_conversation(store, conversation_ids, user_id).values())


def search_users(profiles: Iterable[UserProfile], term: str, *, limit: int = 10) -> list[UserProfile]:
    """Case-insensitive substring match on username or bio."""

    needle = term.strip().lower()
    if not needle:
        return []
    matches = [
        profile
        for profile in profiles
        if needle in (profile.username or "").lower() or needle in (profile.bio or "").lower()
    ]
    return matches[:limit]


def search_hashtags(posts: Iterable[Post], term: str, *, limit: int = 10) -> list[HashtagCount]:
    """Count stored hashtags containing ``term`` (a leading ``#`` is ignored)."""

    needle = term.strip().lower().lstrip("#")
    counts: dict[str, int] = {}
    for post in posts:
        for tag in post.hashtags:
            if needle in tag.lower():
                counts[tag] = counts.get(tag, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [HashtagCount(tag=tag, count=count) for tag, count in ranked[:limit]]


def rank_by_likes(posts: Iterable[Post]) -> list[Post]:
    return sorted(posts, key=lambda post: post.total_likes, reverse=True)


__all__ = [
    "HASHTAG_PATTERN",
    "extract_hashtags",
    "unique_hashtags",
    "CommentThread",
    "thread_comments",
    "group_stories_by_author",
    "unread_messages_query",
    "unread_counts_by_conversation",
    "count_unread_messages",
    "search_users",
    "search_hashtags",
    "rank_by_likes",
]
