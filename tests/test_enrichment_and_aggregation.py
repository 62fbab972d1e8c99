"""Profile joins, hashtag parsing, comment threading and search ranking."""
from __future__ import annotations

from datetime import datetime, timezone

from buzztalks.constants import FALLBACK_USERNAME
from buzztalks.schemas import Comment, Post, UserProfile
from buzztalks.services import aggregation
from buzztalks.services.comment_service import build_thread
from buzztalks.services.enrichment import enrich, summarize_profile
from buzztalks.store import DocumentSnapshot, DocumentStore


class CountingStore(DocumentStore):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.reads: list[tuple[str, str]] = []

    def get(self, collection: str, doc_id: str) -> DocumentSnapshot:
        self.reads.append((collection, doc_id))
        return super().get(collection, doc_id)


def _comment(comment_id: str, author_id: str, parent_id: str | None = None) -> Comment:
    return Comment(id=comment_id, post_id="p1", author_id=author_id, content=comment_id, parent_id=parent_id)


def test_enrich_reads_each_distinct_author_once(seed) -> None:
    from buzztalks.database import SessionLocal

    store = CountingStore(SessionLocal)
    for user_id in ("ann", "bob", "cyd"):
        seed(store, user_id)

    comments = [_comment(f"c{index}", ("ann", "bob", "cyd")[index % 3]) for index in range(50)]
    pairs = enrich(store, comments, lambda item: item.author_id)

    assert len(store.reads) == 3
    assert {profile.username for _, profile in pairs} == {"ann", "bob", "cyd"}


def test_missing_author_falls_back_to_placeholder(store: DocumentStore) -> None:
    pairs = enrich(store, [_comment("c1", "deleted-user")], lambda item: item.author_id)
    summary = summarize_profile(pairs[0][1], "deleted-user")

    assert summary.id == "deleted-user"
    assert summary.username == FALLBACK_USERNAME


def test_extract_hashtags_lowercases_and_keeps_duplicates() -> None:
    assert aggregation.extract_hashtags("Sunny #Beach day #beach #Summer_24!") == ["beach", "beach", "summer_24"]
    assert aggregation.unique_hashtags(["beach", "beach", "summer"]) == ["beach", "summer"]
    assert aggregation.extract_hashtags(None) == []


def test_thread_comments_nests_one_level(store: DocumentStore, seed) -> None:
    seed(store, "ann")
    comments = [
        _comment("top1", "ann"),
        _comment("reply1", "ann", parent_id="top1"),
        _comment("top2", "ann"),
        _comment("reply2", "ann", parent_id="top1"),
    ]

    thread = aggregation.thread_comments(comments)
    assert [comment.id for comment in thread.top_level] == ["top1", "top2"]
    assert [reply.id for reply in thread.replies_to("top1")] == ["reply1", "reply2"]

    responses = build_thread(store, comments)
    assert [item.id for item in responses] == ["top1", "top2"]
    assert [reply.id for reply in responses[0].replies] == ["reply1", "reply2"]
    assert responses[1].replies == []


def test_search_users_matches_username_or_bio() -> None:
    profiles = [
        UserProfile(id="1", username="SunnyDays", bio=""),
        UserProfile(id="2", username="moon", bio="I love the sun"),
        UserProfile(id="3", username="rain", bio="clouds"),
    ]
    assert [profile.id for profile in aggregation.search_users(profiles, "SUN")] == ["1", "2"]
    assert aggregation.search_users(profiles, "   ") == []
    assert len(aggregation.search_users(profiles, "n", limit=2)) == 2


def test_search_hashtags_counts_and_ranks() -> None:
    posts = [
        Post(id="1", author_id="a", hashtags=["travel", "food"]),
        Post(id="2", author_id="a", hashtags=["travel"]),
        Post(id="3", author_id="b", hashtags=["travelgram"]),
    ]
    result = aggregation.search_hashtags(posts, "#Travel")

    assert [(item.tag, item.count) for item in result] == [("travel", 2), ("travelgram", 1)]


def test_group_stories_preserves_first_seen_order() -> None:
    from buzztalks.schemas import Story

    now = datetime.now(timezone.utc)
    stories = [
        Story(id=str(index), author_id=author, media_url="u", created_at=now, expires_at=now)
        for index, author in enumerate(["b", "a", "b"])
    ]
    grouped = aggregation.group_stories_by_author(stories)

    assert list(grouped) == ["b", "a"]
    assert [story.id for story in grouped["b"]] == ["0", "2"]
