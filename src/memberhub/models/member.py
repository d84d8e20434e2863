# src/memberhub/models/member.py
"""SQLAlchemy models for member identities and chapters."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memberhub.db.session import Base
from memberhub.db.time import utcnow

ROLE_USER = "user"
ROLE_MODERATOR = "moderator"
ROLE_ADMIN = "admin"
MEMBER_ROLES = (ROLE_USER, ROLE_MODERATOR, ROLE_ADMIN)


class Member(Base):
    """Identity record owned by the identity store.

    The networking, forum and resource engines only read these rows.
    """

    __tablename__ = "member"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False, default=ROLE_USER)
    title: Mapped[str | None] = mapped_column(Text, nullable=True)
    company: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry: Mapped[str | None] = mapped_column(Text, nullable=True)
    chapter_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("chapter.id"),
        nullable=True,
    )
    last_active: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    chapter: Mapped[Chapter | None] = relationship("Chapter", foreign_keys=[chapter_id])

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class Chapter(Base):
    """Local chapter grouping members by city."""

    __tablename__ = "chapter"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    region: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="Active")

    members: Mapped[list[Member]] = relationship(
        "Member",
        secondary="chapter_member",
        order_by="Member.id",
        viewonly=True,
    )

    @property
    def location(self) -> str:
        return f"{self.city}, {self.country}"


class ChapterMember(Base):
    """Join table listing the members of a chapter."""

    __tablename__ = "chapter_member"

    chapter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("chapter.id", ondelete="CASCADE"),
        primary_key=True,
    )
    member_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Presence implies membership.
