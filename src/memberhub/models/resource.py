# src/memberhub/models/resource.py
"""Models for the resource library and its engagement records."""

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

RESOURCE_TYPES = (
    "article",
    "video",
    "webinar",
    "whitepaper",
    "guide",
    "template",
    "toolkit",
    "presentation",
)
RESOURCE_LEVELS = ("beginner", "intermediate", "advanced")


class Resource(Base):
    """Library item with embedded engagement counters."""

    __tablename__ = "resource"
    __table_args__ = (
        CheckConstraint("comment_count >= 0", name="ck_resource_comment_count"),
        Index("ix_resource_publish_date", "publish_date"),
        Index("ix_resource_comment_count", "comment_count"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    resource_type: Mapped[str] = mapped_column(Text, nullable=False)
    level: Mapped[str] = mapped_column(Text, nullable=False, default="intermediate")
    is_exclusive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    download_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downloads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Denormalized: always equal to the number of rows in resource_comment.
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    publish_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    comments: Mapped[list[ResourceComment]] = relationship(
        "ResourceComment",
        order_by="ResourceComment.id",
        back_populates="resource",
        cascade="all, delete-orphan",
    )
    likes: Mapped[list[ResourceLike]] = relationship(
        "ResourceLike",
        cascade="all, delete-orphan",
    )
    bookmarks: Mapped[list[ResourceBookmark]] = relationship(
        "ResourceBookmark",
        cascade="all, delete-orphan",
    )
    accesses: Mapped[list[ResourceAccess]] = relationship(
        "ResourceAccess",
        cascade="all, delete-orphan",
    )

    @property
    def liked_by(self) -> list[int]:
        return [like.member_id for like in self.likes]

    @property
    def bookmarked_by(self) -> list[int]:
        return [bookmark.member_id for bookmark in self.bookmarks]


class ResourceLike(Base):
    """Member like on a resource."""

    __tablename__ = "resource_like"

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )


class ResourceBookmark(Base):
    """Member bookmark on a resource."""

    __tablename__ = "resource_bookmark"

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )


class ResourceAccess(Base):
    """First access of a resource by a member."""

    __tablename__ = "resource_access"

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )
    accessed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ResourceComment(Base):
    """Comment left on a resource."""

    __tablename__ = "resource_comment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    resource: Mapped[Resource] = relationship("Resource", back_populates="comments")
    author = relationship("Member", foreign_keys=[author_id])
    likes: Mapped[list[CommentLike]] = relationship(
        "CommentLike",
        cascade="all, delete-orphan",
    )
    replies: Mapped[list[CommentReply]] = relationship(
        "CommentReply",
        order_by="CommentReply.id",
        cascade="all, delete-orphan",
    )

    @property
    def liked_by(self) -> list[int]:
        return [like.member_id for like in self.likes]


class CommentLike(Base):
    """Member like on a resource comment."""

    __tablename__ = "resource_comment_like"

    comment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource_comment.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )


class CommentReply(Base):
    """Short reply nested under a resource comment."""

    __tablename__ = "resource_comment_reply"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    comment_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource_comment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class ResourceCommenter(Base):
    """Per-author roll-up of comment activity on a resource."""

    __tablename__ = "resource_commenter"
    __table_args__ = (
        CheckConstraint("comment_count > 0", name="ck_resource_commenter_count"),
    )

    resource_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("resource.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_comment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    member = relationship("Member", foreign_keys=[member_id])
