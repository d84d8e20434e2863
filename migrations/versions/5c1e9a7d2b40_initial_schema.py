"""initial schema

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-17 09:12:41.318204

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e9a7d2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Create member, networking, forum and resource tables."""
    op.create_table(
        "chapter",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("country", sa.Text(), nullable=False),
        sa.Column("region", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "member",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("company", sa.Text(), nullable=True),
        sa.Column("industry", sa.Text(), nullable=True),
        sa.Column("chapter_id", sa.Integer(), nullable=True),
        _timestamp("last_active"),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapter.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "chapter_member",
        sa.Column("chapter_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapter.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("chapter_id", "member_id"),
    )

    op.create_table(
        "connection",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("requester_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=False),
        sa.Column("member_low_id", sa.Integer(), nullable=False),
        sa.Column("member_high_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False),
        sa.Column("relationship_strength", sa.Text(), nullable=False),
        sa.Column("communication_preference", sa.Text(), nullable=False),
        _timestamp("last_contact"),
        sa.Column("last_communication_type", sa.Text(), nullable=True),
        _timestamp("next_follow_up"),
        sa.Column("tags", sa.JSON(), nullable=False),
        _timestamp("last_activity"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("requester_id <> recipient_id", name="ck_connection_not_self"),
        sa.CheckConstraint("member_low_id < member_high_id", name="ck_connection_canonical"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_connection_status",
        ),
        sa.ForeignKeyConstraint(["requester_id"], ["member.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipient_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("member_low_id", "member_high_id", name="uq_connection_pair"),
    )
    op.create_index("ix_connection_next_follow_up", "connection", ["next_follow_up"])
    op.create_index("ix_connection_last_contact", "connection", ["last_contact"])
    op.create_index("ix_connection_strength", "connection", ["relationship_strength"])
    op.create_table(
        "connection_note",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("connection_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=True),
        sa.Column("text", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["connection_id"], ["connection.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["member.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_connection_note_connection_id", "connection_note", ["connection_id"])
    op.create_table(
        "communication_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("connection_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        _timestamp("date", nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("logged_by", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint(
            "type IN ('email', 'phone', 'meeting', 'event')",
            name="ck_communication_log_type",
        ),
        sa.ForeignKeyConstraint(["connection_id"], ["connection.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["logged_by"], ["member.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_communication_log_connection_id", "communication_log", ["connection_id"])

    op.create_table(
        "forum_category",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("topics_count", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("topics_count >= 0", name="ck_forum_category_topics_count"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_table(
        "forum_topic",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False),
        sa.Column("is_locked", sa.Boolean(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        _timestamp("last_activity"),
        _timestamp("last_reply_at"),
        sa.Column("last_reply_by", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["author_id"], ["member.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["forum_category.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["last_reply_by"], ["member.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_forum_topic_category_id", "forum_topic", ["category_id"])
    op.create_index("ix_forum_topic_last_activity", "forum_topic", ["last_activity"])
    op.create_table(
        "forum_reply",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("topic_id", sa.Integer(), nullable=False),
        sa.Column("parent_reply_id", sa.Integer(), nullable=True),
        sa.Column("is_edited", sa.Boolean(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["author_id"], ["member.id"]),
        sa.ForeignKeyConstraint(["topic_id"], ["forum_topic.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_reply_id"], ["forum_reply.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_forum_reply_topic_id", "forum_reply", ["topic_id"])
    op.create_table(
        "forum_reply_like",
        sa.Column("reply_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["reply_id"], ["forum_reply.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("reply_id", "member_id"),
    )

    op.create_table(
        "resource",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=True),
        sa.Column("resource_type", sa.Text(), nullable=False),
        sa.Column("level", sa.Text(), nullable=False),
        sa.Column("is_exclusive", sa.Boolean(), nullable=False),
        sa.Column("read_time", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("download_url", sa.Text(), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False),
        sa.Column("downloads", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        _timestamp("publish_date"),
        _timestamp("updated_at"),
        sa.CheckConstraint("comment_count >= 0", name="ck_resource_comment_count"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_resource_publish_date", "resource", ["publish_date"])
    op.create_index("ix_resource_comment_count", "resource", ["comment_count"])
    for table in ("resource_like", "resource_bookmark"):
        op.create_table(
            table,
            sa.Column("resource_id", sa.Integer(), nullable=False),
            sa.Column("member_id", sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(["resource_id"], ["resource.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("resource_id", "member_id"),
        )
    op.create_table(
        "resource_access",
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        _timestamp("accessed_at"),
        sa.ForeignKeyConstraint(["resource_id"], ["resource.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("resource_id", "member_id"),
    )
    op.create_table(
        "resource_comment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["resource_id"], ["resource.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_resource_comment_resource_id", "resource_comment", ["resource_id"])
    op.create_table(
        "resource_comment_like",
        sa.Column("comment_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["comment_id"], ["resource_comment.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("comment_id", "member_id"),
    )
    op.create_table(
        "resource_comment_reply",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("comment_id", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["comment_id"], ["resource_comment.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_resource_comment_reply_comment_id", "resource_comment_reply", ["comment_id"]
    )
    op.create_table(
        "resource_commenter",
        sa.Column("resource_id", sa.Integer(), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        _timestamp("last_comment_date"),
        sa.CheckConstraint("comment_count > 0", name="ck_resource_commenter_count"),
        sa.ForeignKeyConstraint(["resource_id"], ["resource.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["member.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("resource_id", "member_id"),
    )


def downgrade() -> None:
    """Drop every table in reverse dependency order."""
    for table in (
        "resource_commenter",
        "resource_comment_reply",
        "resource_comment_like",
        "resource_comment",
        "resource_access",
        "resource_bookmark",
        "resource_like",
        "resource",
        "forum_reply_like",
        "forum_reply",
        "forum_topic",
        "forum_category",
        "communication_log",
        "connection_note",
        "connection",
        "chapter_member",
        "member",
        "chapter",
    ):
        op.drop_table(table)
