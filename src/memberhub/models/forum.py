# src/memberhub/models/forum.py
"""SQLAlchemy models for forum categories, topics and replies."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memberhub.db.session import Base
from memberhub.db.time import utcnow


class Category(Base):
    """Forum category with a cached count of its live topics."""

    __tablename__ = "forum_category"
    __table_args__ = (
        CheckConstraint("topics_count >= 0", name="ck_forum_category_topics_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Denormalized: number of non-deleted topics referencing this category.
    topics_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Topic(Base):
    """Discussion thread opened by a member."""

    __tablename__ = "forum_topic"
    __table_args__ = (
        Index("ix_forum_topic_category_id", "category_id"),
        Index("ix_forum_topic_last_activity", "last_activity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id"),
        nullable=False,
    )
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("forum_category.id", ondelete="SET NULL"),
        nullable=True,
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # One-way: once locked a topic never reopens.
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_reply_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_reply_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("member.id"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    author = relationship("Member", foreign_keys=[author_id])
    category: Mapped[Category | None] = relationship("Category")
    replies: Mapped[list[Reply]] = relationship(
        "Reply",
        order_by="Reply.id",
        back_populates="topic",
        cascade="all, delete-orphan",
    )

    @property
    def live_replies(self) -> list[Reply]:
        return [reply for reply in self.replies if not reply.is_deleted]


class Reply(Base):
    """Response posted in a topic, optionally threaded under another reply."""

    __tablename__ = "forum_reply"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id"),
        nullable=False,
    )
    topic_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forum_topic.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    parent_reply_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("forum_reply.id"),
        nullable=True,
    )
    is_edited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    author = relationship("Member", foreign_keys=[author_id])
    topic: Mapped[Topic] = relationship("Topic", back_populates="replies")
    likes: Mapped[list[ReplyLike]] = relationship(
        "ReplyLike",
        order_by="ReplyLike.created_at",
        cascade="all, delete-orphan",
    )

    @property
    def liked_by(self) -> list[int]:
        return [like.member_id for like in self.likes]


class ReplyLike(Base):
    """Like on a reply; the composite key keeps likes a set."""

    __tablename__ = "forum_reply_like"

    reply_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("forum_reply.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
