"""Unit tests for the ORM models defined in memberhub.models.

These tests verify basic mapping correctness: table names, composite
primary keys for the set-like engagement tables, and the constraints that
keep connections unique per pair and counters non-negative.
"""

from sqlalchemy.orm import attributes

from memberhub import models
from memberhub.models import Connection


def test_table_names():
    """Model classes expose expected __tablename__ values."""
    assert models.Member.__tablename__ == "member"
    assert models.Chapter.__tablename__ == "chapter"
    assert models.Connection.__tablename__ == "connection"
    assert models.Category.__tablename__ == "forum_category"
    assert models.Topic.__tablename__ == "forum_topic"
    assert models.Reply.__tablename__ == "forum_reply"
    assert models.Resource.__tablename__ == "resource"
    assert models.ResourceCommenter.__tablename__ == "resource_commenter"


def test_engagement_tables_use_composite_primary_keys():
    """Likes, bookmarks and accesses are sets keyed by (target, member)."""
    expected = {
        models.ReplyLike: {"reply_id", "member_id"},
        models.ResourceLike: {"resource_id", "member_id"},
        models.ResourceBookmark: {"resource_id", "member_id"},
        models.ResourceAccess: {"resource_id", "member_id"},
        models.CommentLike: {"comment_id", "member_id"},
        models.ResourceCommenter: {"resource_id", "member_id"},
        models.ChapterMember: {"chapter_id", "member_id"},
    }
    for model, columns in expected.items():
        assert {c.name for c in model.__table__.primary_key} == columns


def test_connection_pair_constraints():
    constraint_names = {c.name for c in Connection.__table__.constraints}
    assert {"uq_connection_pair", "ck_connection_not_self", "ck_connection_canonical"} <= constraint_names


def test_canonical_pair_ignores_direction():
    first = Connection.between(7, 3)
    second = Connection.between(3, 7)
    assert (first.member_low_id, first.member_high_id) == (3, 7)
    assert (second.member_low_id, second.member_high_id) == (3, 7)
    assert first.other_party_id(7) == 3
    assert first.involves(3) and not first.involves(5)


def test_relationships_are_instrumented_attributes():
    """Relationship attributes are mapped SQLAlchemy descriptors."""
    rel_attrs = [
        models.Connection.notes,
        models.Connection.communication_history,
        models.Topic.replies,
        models.Reply.likes,
        models.Resource.comments,
        models.Resource.bookmarks,
        models.ResourceComment.replies,
        models.Chapter.members,
    ]

    for a in rel_attrs:
        assert isinstance(a, attributes.InstrumentedAttribute)
