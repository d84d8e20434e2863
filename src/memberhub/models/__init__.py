# src/memberhub/models/__init__.py
"""SQLAlchemy models for the Member Hub application."""

from .connection import CommunicationLog, Connection, ConnectionNote
from .forum import Category, Reply, ReplyLike, Topic
from .member import Chapter, ChapterMember, Member
from .resource import (
    CommentLike,
    CommentReply,
    Resource,
    ResourceAccess,
    ResourceBookmark,
    ResourceComment,
    ResourceCommenter,
    ResourceLike,
)

__all__ = [
    "Member", "Chapter", "ChapterMember",
    "Connection", "ConnectionNote", "CommunicationLog",
    "Category", "Topic", "Reply", "ReplyLike",
    "Resource", "ResourceLike", "ResourceBookmark", "ResourceAccess",
    "ResourceComment", "CommentLike", "CommentReply", "ResourceCommenter",
]
