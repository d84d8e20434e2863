# src/memberhub/models/connection.py
"""Models for the member connection graph and relationship metadata."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memberhub.db.session import Base
from memberhub.db.time import utcnow

CONNECTION_STATUS_PENDING = "pending"
CONNECTION_STATUS_ACCEPTED = "accepted"
CONNECTION_STATUS_REJECTED = "rejected"
CONNECTION_STATUSES = (
    CONNECTION_STATUS_PENDING,
    CONNECTION_STATUS_ACCEPTED,
    CONNECTION_STATUS_REJECTED,
)

RELATIONSHIP_STRENGTHS = ("new", "developing", "strong", "key")
COMMUNICATION_PREFERENCES = ("email", "phone", "meeting")
COMMUNICATION_TYPES = ("email", "phone", "meeting", "event")


class Connection(Base):
    """Undirected edge between two members.

    ``requester_id``/``recipient_id`` record who asked whom; the canonical
    ``member_low_id``/``member_high_id`` pair carries the uniqueness constraint
    so only one edge can exist per unordered pair.
    """

    __tablename__ = "connection"
    __table_args__ = (
        UniqueConstraint("member_low_id", "member_high_id", name="uq_connection_pair"),
        CheckConstraint("requester_id <> recipient_id", name="ck_connection_not_self"),
        CheckConstraint("member_low_id < member_high_id", name="ck_connection_canonical"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name="ck_connection_status",
        ),
        Index("ix_connection_next_follow_up", "next_follow_up"),
        Index("ix_connection_last_contact", "last_contact"),
        Index("ix_connection_strength", "relationship_strength"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    requester_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        nullable=False,
    )
    recipient_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="CASCADE"),
        nullable=False,
    )
    member_low_id: Mapped[int] = mapped_column(Integer, nullable=False)
    member_high_id: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[str] = mapped_column(Text, nullable=False, default=CONNECTION_STATUS_PENDING)
    relationship_strength: Mapped[str] = mapped_column(Text, nullable=False, default="new")
    communication_preference: Mapped[str] = mapped_column(Text, nullable=False, default="email")
    last_contact: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_communication_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_follow_up: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    last_activity: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    requester = relationship("Member", foreign_keys=[requester_id])
    recipient = relationship("Member", foreign_keys=[recipient_id])

    notes: Mapped[list[ConnectionNote]] = relationship(
        "ConnectionNote",
        order_by="ConnectionNote.id",
        cascade="all, delete-orphan",
        back_populates="connection",
    )
    communication_history: Mapped[list[CommunicationLog]] = relationship(
        "CommunicationLog",
        order_by="CommunicationLog.id",
        cascade="all, delete-orphan",
        back_populates="connection",
    )

    @staticmethod
    def canonical_pair(first_id: int, second_id: int) -> tuple[int, int]:
        """Return the two member ids ordered low to high."""
        return (first_id, second_id) if first_id < second_id else (second_id, first_id)

    @classmethod
    def between(cls, requester_id: int, recipient_id: int, **fields: object) -> Connection:
        """Build an edge with its canonical pair columns filled in."""
        low, high = cls.canonical_pair(requester_id, recipient_id)
        return cls(
            requester_id=requester_id,
            recipient_id=recipient_id,
            member_low_id=low,
            member_high_id=high,
            **fields,
        )

    def involves(self, member_id: int) -> bool:
        return member_id in (self.requester_id, self.recipient_id)

    def other_party_id(self, member_id: int) -> int:
        """Return the id on the opposite end of the edge from ``member_id``."""
        return self.recipient_id if self.requester_id == member_id else self.requester_id

    def other_party(self, member_id: int):
        return self.recipient if self.requester_id == member_id else self.requester


class ConnectionNote(Base):
    """Single timestamped note attached to a connection."""

    __tablename__ = "connection_note"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    connection_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("connection.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="SET NULL"),
        nullable=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    connection: Mapped[Connection] = relationship("Connection", back_populates="notes")


class CommunicationLog(Base):
    """Entry in a connection's communication history."""

    __tablename__ = "communication_log"
    __table_args__ = (
        CheckConstraint(
            "type IN ('email', 'phone', 'meeting', 'event')",
            name="ck_communication_log_type",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    connection_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("connection.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    logged_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("member.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    connection: Mapped[Connection] = relationship(
        "Connection",
        back_populates="communication_history",
    )
