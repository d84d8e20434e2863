# mypy: ignore-errors
# tests/services/test_forum.py
"""Tests for the forum engine and its denormalized counters."""

import logging

import pytest
from sqlalchemy import update

from memberhub.db.time import as_utc
from memberhub.models import Category, Topic
from memberhub.services.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from memberhub.services.forum import DELETED_REPLY_TEXT, ForumService, topic_detail

CONTENT = "Long enough content for a topic body."


@pytest.fixture()
def forum(db_session):
    return ForumService(db_session)


@pytest.fixture()
def topic(forum, alice_actor, general_category):
    return forum.create_topic(
        alice_actor,
        "Raising a seed round",
        CONTENT,
        category_id=general_category.id,
        tags=["Funding", "seed"],
    )


def test_general_category_scenario(forum, db_session, alice_actor, admin_actor, general_category) -> None:
    topic = forum.create_topic(alice_actor, "Hello world", CONTENT, category_id=general_category.id)
    db_session.refresh(general_category)
    assert general_category.topics_count == 1

    with pytest.raises(ConflictError):
        forum.delete_category(admin_actor, general_category.id)

    forum.delete_topic(topic.id, alice_actor)
    db_session.refresh(general_category)
    assert general_category.topics_count == 0

    forum.delete_category(admin_actor, general_category.id)
    assert db_session.get(Category, general_category.id) is None


def test_topics_count_never_goes_negative(
    forum, db_session, topic, alice_actor, general_category, caplog
) -> None:
    db_session.execute(
        update(Category).where(Category.id == general_category.id).values(topics_count=0)
    )
    db_session.commit()

    with caplog.at_level(logging.WARNING, logger="memberhub.services.forum"):
        forum.delete_topic(topic.id, alice_actor)

    db_session.refresh(general_category)
    assert general_category.topics_count == 0
    assert "already 0" in caplog.text


def test_reconcile_category_counts_repairs_drift(
    forum, db_session, topic, general_category
) -> None:
    db_session.execute(
        update(Category).where(Category.id == general_category.id).values(topics_count=7)
    )
    db_session.commit()

    drift = forum.reconcile_category_counts()

    assert drift == [
        {"category_id": general_category.id, "slug": "general", "cached": 7, "actual": 1}
    ]
    db_session.refresh(general_category)
    assert general_category.topics_count == 1
    assert forum.reconcile_category_counts() == []


def test_add_category_is_admin_only(forum, alice_actor, admin_actor, general_category) -> None:
    with pytest.raises(AuthorizationError):
        forum.add_category(alice_actor, "Events")

    category = forum.add_category(admin_actor, "Deal Flow & Funding", icon="coins")
    assert category.slug == "deal-flow-funding"
    assert category.order == general_category.order + 1

    with pytest.raises(ConflictError):
        forum.add_category(admin_actor, "deal flow funding")


def test_update_category(forum, admin_actor, general_category) -> None:
    category = forum.update_category(
        admin_actor, general_category.id, {"name": "General Chat", "is_active": False}
    )

    assert category.slug == "general-chat"
    assert forum.list_categories() == []
    assert forum.list_categories(include_inactive=True) == [category]


def test_create_topic_validates_input(forum, alice_actor) -> None:
    with pytest.raises(ValidationError):
        forum.create_topic(alice_actor, "Hi", CONTENT)
    with pytest.raises(ValidationError):
        forum.create_topic(alice_actor, "Valid title", "too short")
    with pytest.raises(NotFoundError):
        forum.create_topic(alice_actor, "Valid title", CONTENT, category_id=99999)


def test_create_topic_normalizes_and_caps_tags(forum, alice_actor) -> None:
    topic = forum.create_topic(
        alice_actor,
        "Tag heavy topic",
        CONTENT,
        tags=["A", "a ", "b", "c", "", "d", "e", "f"],
    )

    assert topic.tags == ["a", "b", "c", "d", "e"]
    assert topic.category_id is None


def test_get_topic_counts_views(forum, topic) -> None:
    forum.get_topic(topic.id)
    fetched = forum.get_topic(topic.id)

    assert fetched.views == 2


def test_delete_topic_permissions(forum, topic, bob_actor, moderator_actor) -> None:
    with pytest.raises(AuthorizationError):
        forum.delete_topic(topic.id, bob_actor)

    forum.delete_topic(topic.id, moderator_actor)

    with pytest.raises(NotFoundError):
        forum.get_topic(topic.id)


def test_lock_requires_moderator(forum, topic, alice_actor, moderator_actor) -> None:
    with pytest.raises(AuthorizationError):
        forum.lock_topic(topic.id, alice_actor)

    assert forum.lock_topic(topic.id, moderator_actor).is_locked is True


def test_locked_topic_refuses_replies(forum, topic, bob_actor, moderator_actor) -> None:
    reply = forum.add_reply(topic.id, bob_actor, "Before the lock")
    forum.lock_topic(topic.id, moderator_actor)

    with pytest.raises(StateError):
        forum.add_reply(topic.id, bob_actor, "After the lock")
    with pytest.raises(StateError):
        forum.edit_reply(reply.id, bob_actor, "Sneaky edit")
    assert len(topic.replies) == 1


def test_add_reply_moves_last_reply_markers(forum, db_session, topic, bob, bob_actor) -> None:
    reply = forum.add_reply(topic.id, bob_actor, "  Happy to help  ")
    db_session.refresh(topic)

    assert reply.content == "Happy to help"
    assert topic.last_reply_by == bob.id
    assert as_utc(topic.last_reply_at) == as_utc(reply.created_at)
    assert as_utc(topic.last_activity) == as_utc(reply.created_at)


def test_reply_content_bounds(forum, topic, bob_actor) -> None:
    with pytest.raises(ValidationError):
        forum.add_reply(topic.id, bob_actor, "   ")
    with pytest.raises(ValidationError):
        forum.add_reply(topic.id, bob_actor, "x" * 5001)

    assert len(forum.add_reply(topic.id, bob_actor, "x" * 5000).content) == 5000


def test_reply_parent_must_exist_in_same_topic(forum, topic, alice_actor, bob_actor) -> None:
    other = forum.create_topic(alice_actor, "Another topic", CONTENT)
    foreign = forum.add_reply(other.id, bob_actor, "Elsewhere")

    with pytest.raises(NotFoundError):
        forum.add_reply(topic.id, bob_actor, "Orphan", parent_reply_id=99999)
    with pytest.raises(ValidationError):
        forum.add_reply(topic.id, bob_actor, "Cross-thread", parent_reply_id=foreign.id)

    parent = forum.add_reply(topic.id, bob_actor, "Parent")
    child = forum.add_reply(topic.id, alice_actor, "Child", parent_reply_id=parent.id)
    assert child.parent_reply_id == parent.id


def test_reply_to_deleted_reply_is_rejected(forum, topic, alice_actor, bob_actor) -> None:
    parent = forum.add_reply(topic.id, bob_actor, "Soon gone")
    forum.delete_reply(parent.id, bob_actor)

    with pytest.raises(NotFoundError):
        forum.add_reply(topic.id, alice_actor, "Answering a tombstone", parent_reply_id=parent.id)

    assert [r.id for r in topic.replies if not r.is_deleted] == []


def test_edit_reply_is_author_only(forum, topic, alice_actor, bob_actor) -> None:
    reply = forum.add_reply(topic.id, bob_actor, "Original")

    with pytest.raises(AuthorizationError):
        forum.edit_reply(reply.id, alice_actor, "Hijacked")

    edited = forum.edit_reply(reply.id, bob_actor, "Revised")
    assert edited.content == "Revised"
    assert edited.is_edited is True


def test_delete_reply_recomputes_last_reply(
    forum, db_session, topic, alice, alice_actor, bob_actor
) -> None:
    first = forum.add_reply(topic.id, alice_actor, "First")
    second = forum.add_reply(topic.id, bob_actor, "Second")

    forum.delete_reply(second.id, bob_actor)
    db_session.refresh(topic)
    assert topic.last_reply_by == alice.id
    assert as_utc(topic.last_reply_at) == as_utc(first.created_at)

    forum.delete_reply(first.id, alice_actor)
    db_session.refresh(topic)
    assert topic.last_reply_by is None
    assert topic.last_reply_at is None
    assert as_utc(topic.last_activity) == as_utc(topic.created_at)


def test_deleted_reply_is_a_tombstone(forum, topic, bob_actor, moderator_actor) -> None:
    reply = forum.add_reply(topic.id, bob_actor, "Regrettable")
    forum.delete_reply(reply.id, moderator_actor)

    detail = topic_detail(topic)
    assert detail["replies_count"] == 0
    assert detail["replies"][0]["content"] == DELETED_REPLY_TEXT
    assert detail["replies"][0]["author"] is None
    with pytest.raises(NotFoundError):
        forum.like_reply(reply.id, bob_actor)


def test_like_reply_toggles(forum, topic, alice_actor, bob_actor) -> None:
    reply = forum.add_reply(topic.id, bob_actor, "Like me")

    assert forum.like_reply(reply.id, alice_actor) == {"liked": True, "likes_count": 1}
    assert forum.like_reply(reply.id, alice_actor) == {"liked": False, "likes_count": 0}


def test_list_topics_orders_pinned_first(forum, topic, alice_actor, moderator_actor) -> None:
    later = forum.create_topic(alice_actor, "A newer topic", CONTENT)
    forum.pin_topic(topic.id, moderator_actor)

    listing = forum.list_topics()
    assert [row["id"] for row in listing["topics"]] == [topic.id, later.id]
    assert listing["pagination"] == {"total": 2, "page": 1, "limit": 10, "pages": 1}

    forum.unpin_topic(topic.id, moderator_actor)
    assert [row["id"] for row in forum.list_topics()["topics"]] == [later.id, topic.id]


def test_list_topics_filters(forum, topic, alice_actor, bob_actor) -> None:
    answered = forum.create_topic(alice_actor, "Answered question", CONTENT)
    forum.add_reply(answered.id, bob_actor, "An answer")

    unanswered = forum.list_topics(filter_by="unanswered")["topics"]
    assert [row["id"] for row in unanswered] == [topic.id]

    in_general = forum.list_topics(category_slug="general")["topics"]
    assert [row["id"] for row in in_general] == [topic.id]

    by_text = forum.list_topics(search="answered")["topics"]
    assert [row["id"] for row in by_text] == [answered.id]

    with pytest.raises(NotFoundError):
        forum.list_topics(category_slug="missing")
    with pytest.raises(ValidationError):
        forum.list_topics(filter_by="hottest")


def test_search_topics(forum, topic, alice_actor) -> None:
    assert forum.search_topics("s") == []
    assert forum.search_topics("SEED") == [topic]

    forum.delete_topic(topic.id, alice_actor)
    assert forum.search_topics("seed") == []


def test_trending_tags_break_ties_by_first_seen(forum, db_session, alice_actor) -> None:
    for title, tags in (
        ("Topic one", ["b", "a"]),
        ("Topic two", ["a", "c"]),
        ("Topic three", ["c"]),
    ):
        forum.create_topic(alice_actor, title, CONTENT, tags=tags)
    hidden = forum.create_topic(alice_actor, "Topic four", CONTENT, tags=["b", "b2"])
    forum.delete_topic(hidden.id, alice_actor)

    assert forum.trending_tags() == [
        {"tag": "a", "count": 2},
        {"tag": "c", "count": 2},
        {"tag": "b", "count": 1},
    ]
    assert forum.trending_tags(limit=1) == [{"tag": "a", "count": 2}]


def test_topic_form_options(forum, topic, general_category) -> None:
    options = forum.topic_form_options()

    assert options["max_tags"] == 5
    assert options["suggested_tags"] == ["funding", "seed"]
    assert options["categories"] == [
        {"id": general_category.id, "name": "General", "slug": "general"}
    ]
    assert forum.topic_filters()["filters"] == ["recent", "popular", "unanswered"]


def test_deleted_topic_hidden_from_counts_and_lists(forum, db_session, topic, alice_actor) -> None:
    forum.delete_topic(topic.id, alice_actor)

    assert db_session.get(Topic, topic.id).is_deleted is True
    assert forum.list_topics()["topics"] == []
    with pytest.raises(NotFoundError):
        forum.delete_topic(topic.id, alice_actor)
