# src/memberhub/services/connection_graph.py
"""Connection graph engine.

Manages the request → accepted/rejected lifecycle of member connections, the
relationship metadata kept on accepted edges (strength, tags, notes, follow-up
dates, communication history) and the read-side views built on top of it
(search, potential connections, follow-up lists).

All mutations are last-write-wins: there is no optimistic version check, so a
concurrent accept and reject on the same request race and either may win.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from memberhub.core.settings import settings
from memberhub.db.time import as_utc, utcnow
from memberhub.models import Chapter, CommunicationLog, Connection, ConnectionNote, Member
from memberhub.models.connection import (
    COMMUNICATION_PREFERENCES,
    COMMUNICATION_TYPES,
    CONNECTION_STATUS_ACCEPTED,
    CONNECTION_STATUS_PENDING,
    CONNECTION_STATUS_REJECTED,
    RELATIONSHIP_STRENGTHS,
)
from memberhub.services.capabilities import Actor
from memberhub.services.errors import (
    ConflictError,
    MemberHubError,
    NotFoundError,
    ValidationError,
)
from memberhub.services.listing import check_page, normalize_tags, pagination

logger = logging.getLogger(__name__)

SEARCH_TYPES = ("all", "connections", "pending", "chapter")
SEARCH_SORTS = ("name", "company", "industry", "recent")
RELATIONSHIP_FIELDS = (
    "next_follow_up",
    "notes",
    "relationship_strength",
    "communication_preference",
    "tags",
)
KEY_STRENGTHS = ("key", "strong")

_EPOCH = datetime.min.replace(tzinfo=UTC)


def member_card(member: Member) -> dict[str, Any]:
    """Public summary of a member used across network views."""
    return {
        "id": member.id,
        "name": member.name,
        "title": member.title,
        "company": member.company,
        "industry": member.industry,
        "last_active": member.last_active,
    }


class _SearchFilter:
    """Text, industry and company predicates shared by every search subset."""

    def __init__(self, query: str | None, industry: str | None, company: str | None) -> None:
        self.query = (query or "").strip().lower()
        self.industry = industry or None
        self.company = (company or "").strip().lower()

    def matches(self, row: Mapping[str, Any]) -> bool:
        if self.query:
            searchable = " ".join(
                str(row.get(field) or "") for field in ("name", "title", "company", "industry")
            ).lower()
            if self.query not in searchable:
                return False
        if self.industry and row.get("industry") != self.industry:
            return False
        if self.company and self.company not in (row.get("company") or "").lower():
            return False
        return True


def _result_date(row: Mapping[str, Any]) -> datetime:
    for field in ("connection_date", "request_date", "last_active"):
        value = row.get(field)
        if value is not None:
            return as_utc(value)
    return _EPOCH


def sort_results(results: list[dict[str, Any]], sort_by: str) -> list[dict[str, Any]]:
    """Sort search rows by name/company/industry or most recent date first."""
    if sort_by == "recent":
        return sorted(results, key=_result_date, reverse=True)
    return sorted(results, key=lambda row: (row.get(sort_by) or "").casefold())


class ConnectionGraphService:
    """Operations on the member connection graph bound to a session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def get_connection(self, connection_id: int) -> Connection:
        connection = self.db.get(Connection, connection_id)
        if connection is None:
            raise NotFoundError("Connection not found")
        return connection

    def _get_member(self, member_id: int) -> Member:
        member = self.db.get(Member, member_id)
        if member is None:
            raise NotFoundError("Member not found")
        return member

    def find_between(self, first_id: int, second_id: int) -> Connection | None:
        """Return the edge between two members regardless of direction."""
        low, high = Connection.canonical_pair(first_id, second_id)
        return self.db.scalars(
            select(Connection).where(
                Connection.member_low_id == low,
                Connection.member_high_id == high,
            )
        ).first()

    def _connections_of(self, member_id: int, status: str | None = None) -> list[Connection]:
        stmt = select(Connection).where(
            or_(Connection.requester_id == member_id, Connection.recipient_id == member_id)
        )
        if status is not None:
            stmt = stmt.where(Connection.status == status)
        return list(self.db.scalars(stmt.order_by(Connection.id)))

    def _accepted_neighbour_ids(self, member_id: int) -> set[int]:
        return {
            connection.other_party_id(member_id)
            for connection in self._connections_of(member_id, CONNECTION_STATUS_ACCEPTED)
        }

    def _commit_new(self, connection: Connection) -> Connection:
        self.db.add(connection)
        try:
            self.db.commit()
        except IntegrityError as err:
            # Unique pair constraint caught a concurrent request for the same pair.
            self.db.rollback()
            raise ConflictError("Connection already exists") from err
        self.db.refresh(connection)
        return connection

    # ------------------------------------------------------------------
    # Request lifecycle
    # ------------------------------------------------------------------
    def send_request(self, actor: Actor, recipient_id: int) -> Connection:
        """Open a pending request from ``actor`` to ``recipient_id``."""
        if recipient_id == actor.member_id:
            raise ValidationError("Cannot connect to yourself")
        self._get_member(recipient_id)

        existing = self.find_between(actor.member_id, recipient_id)
        if existing is not None:
            raise ConflictError("Connection already exists")

        connection = self._commit_new(
            Connection.between(
                actor.member_id,
                recipient_id,
                status=CONNECTION_STATUS_PENDING,
            )
        )
        logger.info(
            "Connection request %s sent from member %s to member %s",
            connection.id,
            actor.member_id,
            recipient_id,
        )
        return connection

    def _answer(self, connection_id: int, actor: Actor, new_status: str, action: str) -> Connection:
        connection = self.get_connection(connection_id)
        actor.require_recipient(connection, action)
        if connection.status != CONNECTION_STATUS_PENDING:
            raise ConflictError(f"Connection request already {connection.status}")

        connection.status = new_status
        if new_status == CONNECTION_STATUS_ACCEPTED:
            connection.last_activity = utcnow()
        self.db.commit()
        self.db.refresh(connection)
        logger.info("Connection %s %s by member %s", connection.id, new_status, actor.member_id)
        return connection

    def accept(self, connection_id: int, actor: Actor) -> Connection:
        return self._answer(connection_id, actor, CONNECTION_STATUS_ACCEPTED, "accept")

    def reject(self, connection_id: int, actor: Actor) -> Connection:
        return self._answer(connection_id, actor, CONNECTION_STATUS_REJECTED, "reject")

    def remove(self, connection_id: int) -> None:
        """Hard-delete an edge in any status.

        No ownership check is applied here; callers that need one must add it.
        """
        connection = self.get_connection(connection_id)
        self.db.delete(connection)
        self.db.commit()
        logger.info("Connection %s removed", connection_id)

    # ------------------------------------------------------------------
    # Relationship management
    # ------------------------------------------------------------------
    def update_relationship(
        self,
        connection_id: int,
        actor: Actor,
        patch: Mapping[str, Any],
    ) -> Connection:
        """Apply a partial update; fields absent from ``patch`` are untouched."""
        connection = self.get_connection(connection_id)
        actor.require_party(connection)

        unknown = set(patch) - set(RELATIONSHIP_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown relationship fields: {', '.join(sorted(unknown))}")

        if "relationship_strength" in patch:
            strength = patch["relationship_strength"]
            if strength not in RELATIONSHIP_STRENGTHS:
                raise ValidationError(f"Invalid relationship strength: {strength}")
            connection.relationship_strength = strength
        if "communication_preference" in patch:
            preference = patch["communication_preference"]
            if preference not in COMMUNICATION_PREFERENCES:
                raise ValidationError(f"Invalid communication preference: {preference}")
            connection.communication_preference = preference
        if "tags" in patch:
            tags = patch["tags"] or []
            if isinstance(tags, str):
                raise ValidationError("Tags must be a list of strings")
            connection.tags = normalize_tags(tags)
        if "next_follow_up" in patch:
            connection.next_follow_up = patch["next_follow_up"]
        if patch.get("notes"):
            self._append_note(connection, actor, patch["notes"])

        self.db.commit()
        self.db.refresh(connection)
        logger.info(
            "Relationship %s updated by member %s (%s)",
            connection.id,
            actor.member_id,
            ", ".join(sorted(patch)),
        )
        return connection

    def log_communication(
        self,
        connection_id: int,
        actor: Actor,
        communication_type: str,
        notes: str | None = None,
        follow_up_date: datetime | None = None,
    ) -> Connection:
        """Record a contact with the other party and stamp ``last_contact``."""
        connection = self.get_connection(connection_id)
        actor.require_party(connection)
        if communication_type not in COMMUNICATION_TYPES:
            raise ValidationError(f"Invalid communication type: {communication_type}")

        now = utcnow()
        connection.communication_history.append(
            CommunicationLog(
                type=communication_type,
                date=now,
                notes=notes,
                logged_by=actor.member_id,
            )
        )
        connection.last_contact = now
        connection.last_communication_type = communication_type
        connection.last_activity = now
        if follow_up_date is not None:
            connection.next_follow_up = follow_up_date

        self.db.commit()
        self.db.refresh(connection)
        logger.info(
            "Logged %s communication on connection %s by member %s",
            communication_type,
            connection.id,
            actor.member_id,
        )
        return connection

    def schedule_follow_up(
        self,
        connection_id: int,
        actor: Actor,
        follow_up_date: datetime,
        note: str | None = None,
    ) -> Connection:
        connection = self.get_connection(connection_id)
        actor.require_party(connection)
        connection.next_follow_up = follow_up_date
        if note:
            self._append_note(connection, actor, note)
        self.db.commit()
        self.db.refresh(connection)
        return connection

    def add_note(self, connection_id: int, actor: Actor, note: str) -> Connection:
        """Append a note entry; earlier notes are never replaced."""
        connection = self.get_connection(connection_id)
        actor.require_party(connection)
        self._append_note(connection, actor, note)
        self.db.commit()
        self.db.refresh(connection)
        return connection

    @staticmethod
    def _append_note(connection: Connection, actor: Actor, note: str) -> None:
        text = (note or "").strip()
        if not text:
            raise ValidationError("Note cannot be empty")
        connection.notes.append(ConnectionNote(author_id=actor.member_id, text=text))

    # ------------------------------------------------------------------
    # Admin operations
    # ------------------------------------------------------------------
    def _create_accepted(
        self,
        first_id: int | None,
        second_id: int | None,
        notes: str | None,
        author_id: int,
    ) -> Connection:
        if not first_id or not second_id:
            raise ValidationError("Both member IDs are required")
        if first_id == second_id:
            raise ValidationError("Cannot connect a member to themselves")
        if self.db.get(Member, first_id) is None or self.db.get(Member, second_id) is None:
            raise NotFoundError("One or both members not found")

        existing = self.find_between(first_id, second_id)
        if existing is not None:
            raise ConflictError(f"Connection already exists ({existing.status})")

        connection = Connection.between(
            first_id,
            second_id,
            status=CONNECTION_STATUS_ACCEPTED,
            last_activity=utcnow(),
        )
        if notes:
            connection.notes.append(ConnectionNote(author_id=author_id, text=notes.strip()))
        return self._commit_new(connection)

    def create_direct_connection(
        self,
        actor: Actor,
        first_id: int,
        second_id: int,
        notes: str | None = None,
    ) -> Connection:
        """Create an already-accepted edge between two members (admin only)."""
        actor.require_admin()
        connection = self._create_accepted(first_id, second_id, notes, actor.member_id)
        logger.info(
            "Admin %s connected members %s and %s",
            actor.member_id,
            first_id,
            second_id,
        )
        return connection

    def bulk_add_connections(
        self,
        actor: Actor,
        items: Iterable[Mapping[str, Any]],
    ) -> dict[str, Any]:
        """Create accepted edges item by item, collecting per-item failures."""
        actor.require_admin()
        items = list(items)
        if not items:
            raise ValidationError("Valid connections array is required")

        results: dict[str, Any] = {
            "total": len(items),
            "successful": 0,
            "failed": 0,
            "errors": [],
        }
        for item in items:
            first_id = item.get("user_id_1")
            second_id = item.get("user_id_2")
            try:
                self._create_accepted(first_id, second_id, item.get("notes"), actor.member_id)
            except MemberHubError as exc:
                results["failed"] += 1
                results["errors"].append(f"{exc.message}: {first_id}, {second_id}")
                continue
            results["successful"] += 1

        logger.info(
            "Bulk connection import by admin %s: %d created, %d failed",
            actor.member_id,
            results["successful"],
            results["failed"],
        )
        return results

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------
    def network_stats(self, member_id: int) -> dict[str, int]:
        member = self._get_member(member_id)
        total_connections = self.db.scalar(
            select(func.count()).select_from(Connection).where(
                or_(Connection.requester_id == member_id, Connection.recipient_id == member_id),
                Connection.status == CONNECTION_STATUS_ACCEPTED,
            )
        ) or 0
        pending_requests = self.db.scalar(
            select(func.count()).select_from(Connection).where(
                Connection.recipient_id == member_id,
                Connection.status == CONNECTION_STATUS_PENDING,
            )
        ) or 0
        chapter_members = 0
        if member.chapter_id is not None:
            chapter = self.db.get(Chapter, member.chapter_id)
            if chapter is not None:
                chapter_members = len(chapter.members)
        return {
            "total_connections": int(total_connections),
            "pending_requests": int(pending_requests),
            "chapter_members": chapter_members,
        }

    def _connection_rows(self, member_id: int) -> list[dict[str, Any]]:
        mine = self._accepted_neighbour_ids(member_id)
        rows = []
        for connection in self._connections_of(member_id, CONNECTION_STATUS_ACCEPTED):
            other = connection.other_party(member_id)
            row = member_card(other)
            row.update(
                connection_id=connection.id,
                mutual_connections=len(mine & self._accepted_neighbour_ids(other.id)),
                connection_date=connection.updated_at,
            )
            rows.append(row)
        return rows

    def _pending_rows(self, member_id: int) -> list[dict[str, Any]]:
        stmt = (
            select(Connection)
            .where(
                Connection.recipient_id == member_id,
                Connection.status == CONNECTION_STATUS_PENDING,
            )
            .order_by(Connection.id)
        )
        rows = []
        for request in self.db.scalars(stmt):
            row = member_card(request.requester)
            row.update(connection_id=request.id, request_date=request.created_at)
            rows.append(row)
        return rows

    def _chapter_rows(self, member_id: int) -> list[dict[str, Any]]:
        member = self._get_member(member_id)
        if member.chapter_id is None:
            return []
        chapter = self.db.get(Chapter, member.chapter_id)
        if chapter is None:
            return []
        rows = []
        for peer in chapter.members:
            if peer.id == member_id:
                continue
            row = member_card(peer)
            row.update(chapter_name=chapter.name, location=chapter.location)
            rows.append(row)
        return rows

    def list_connections(self, member_id: int) -> list[dict[str, Any]]:
        return self._connection_rows(member_id)

    def pending_requests(self, member_id: int) -> list[dict[str, Any]]:
        return [
            {
                "id": row["connection_id"],
                "user": {key: row[key] for key in ("id", "name", "title", "company", "industry")},
                "request_date": row["request_date"],
            }
            for row in self._pending_rows(member_id)
        ]

    def chapter_members(self, member_id: int) -> dict[str, Any]:
        member = self._get_member(member_id)
        chapter = self.db.get(Chapter, member.chapter_id) if member.chapter_id else None
        if chapter is None:
            raise NotFoundError("No chapter associated with member")
        return {
            "chapter_name": chapter.name,
            "location": chapter.location,
            "members": [member_card(peer) for peer in chapter.members if peer.id != member_id],
        }

    def _relationship_row(self, connection: Connection, member_id: int) -> dict[str, Any]:
        return {
            "connection_id": connection.id,
            "member": member_card(connection.other_party(member_id)),
            "relationship_strength": connection.relationship_strength,
            "communication_preference": connection.communication_preference,
            "last_contact": connection.last_contact,
            "last_communication_type": connection.last_communication_type,
            "next_follow_up": connection.next_follow_up,
            "tags": list(connection.tags or []),
            "last_activity": connection.last_activity,
        }

    def list_members(
        self,
        member_id: int,
        *,
        strength: str | None = None,
        tag: str | None = None,
    ) -> list[dict[str, Any]]:
        """Accepted connections with their relationship metadata."""
        if strength is not None and strength not in RELATIONSHIP_STRENGTHS:
            raise ValidationError(f"Invalid relationship strength: {strength}")
        tag = tag.strip().lower() if tag else None
        rows = []
        for connection in self._connections_of(member_id, CONNECTION_STATUS_ACCEPTED):
            if strength and connection.relationship_strength != strength:
                continue
            if tag and tag not in (connection.tags or []):
                continue
            rows.append(self._relationship_row(connection, member_id))
        return rows

    def follow_ups_due(self, member_id: int, days: int | None = None) -> list[dict[str, Any]]:
        """Accepted connections whose follow-up falls within the next ``days``."""
        horizon = utcnow() + timedelta(
            days=settings.follow_up_horizon_days if days is None else days
        )
        stmt = (
            select(Connection)
            .where(
                or_(Connection.requester_id == member_id, Connection.recipient_id == member_id),
                Connection.status == CONNECTION_STATUS_ACCEPTED,
                Connection.next_follow_up.is_not(None),
                Connection.next_follow_up <= horizon,
            )
            .order_by(Connection.next_follow_up, Connection.id)
        )
        return [self._relationship_row(c, member_id) for c in self.db.scalars(stmt)]

    def recent_communications(self, member_id: int, limit: int | None = None) -> list[dict[str, Any]]:
        stmt = (
            select(CommunicationLog)
            .join(Connection, CommunicationLog.connection_id == Connection.id)
            .where(or_(Connection.requester_id == member_id, Connection.recipient_id == member_id))
            .order_by(CommunicationLog.date.desc(), CommunicationLog.id.desc())
            .limit(limit or settings.recent_communications_limit)
        )
        return [
            {
                "connection_id": entry.connection_id,
                "member": member_card(entry.connection.other_party(member_id)),
                "type": entry.type,
                "date": entry.date,
                "notes": entry.notes,
                "logged_by": entry.logged_by,
            }
            for entry in self.db.scalars(stmt)
        ]

    def key_relationships(self, member_id: int) -> list[dict[str, Any]]:
        rows = [
            self._relationship_row(connection, member_id)
            for connection in self._connections_of(member_id, CONNECTION_STATUS_ACCEPTED)
            if connection.relationship_strength in KEY_STRENGTHS
        ]
        return sorted(rows, key=lambda row: KEY_STRENGTHS.index(row["relationship_strength"]))

    def filter_options(self) -> dict[str, Any]:
        chapters = self.db.scalars(select(Chapter).order_by(Chapter.name))
        industries = self.db.scalars(
            select(Member.industry)
            .where(Member.industry.is_not(None), Member.industry != "")
            .distinct()
            .order_by(Member.industry)
        )
        return {
            "chapters": [
                {"id": chapter.id, "name": chapter.name, "location": chapter.location}
                for chapter in chapters
            ],
            "industries": list(industries),
        }

    def find_potential_connections(self, member_id: int) -> list[dict[str, Any]]:
        """Suggest members sharing an industry or chapter who are not yet linked.

        Any existing edge, whatever its status, excludes the other party.
        """
        member = self._get_member(member_id)
        excluded = {member_id}
        excluded.update(c.other_party_id(member_id) for c in self._connections_of(member_id))

        criteria = []
        if member.industry:
            criteria.append(Member.industry == member.industry)
        if member.chapter_id is not None:
            criteria.append(Member.chapter_id == member.chapter_id)
        if not criteria:
            return []

        candidates = self.db.scalars(
            select(Member)
            .where(Member.id.not_in(excluded), or_(*criteria))
            .order_by(Member.id)
            .limit(settings.potential_connections_limit)
        )
        suggestions = []
        for candidate in candidates:
            row = member_card(candidate)
            row.pop("last_active")
            same_industry = bool(member.industry) and candidate.industry == member.industry
            row["match_reason"] = "Same industry" if same_industry else "Same chapter"
            suggestions.append(row)
        return suggestions

    def search(
        self,
        member_id: int,
        *,
        query: str | None = None,
        search_type: str = "all",
        industry: str | None = None,
        company: str | None = None,
        sort_by: str = "name",
        page: int = 1,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Search connections, incoming requests and chapter peers.

        Each subset is filtered independently; with ``search_type="all"`` the
        rows are tagged with their ``connection_type`` before being combined,
        sorted and paginated.
        """
        if search_type not in SEARCH_TYPES:
            raise ValidationError(f"Invalid search type: {search_type}")
        if sort_by not in SEARCH_SORTS:
            raise ValidationError(f"Invalid sort option: {sort_by}")
        limit = settings.network_page_size if limit is None else limit
        check_page(page, limit)

        criteria = _SearchFilter(query, industry, company)
        subsets = {
            "connections": ("connection", self._connection_rows),
            "pending": ("pending", self._pending_rows),
            "chapter": ("chapter", self._chapter_rows),
        }

        results: list[dict[str, Any]] = []
        if search_type == "all":
            for label, fetch in subsets.values():
                for row in fetch(member_id):
                    if criteria.matches(row):
                        row["connection_type"] = label
                        results.append(row)
        else:
            _, fetch = subsets[search_type]
            results = [row for row in fetch(member_id) if criteria.matches(row)]

        results = sort_results(results, sort_by)
        total = len(results)
        skip = (page - 1) * limit
        return {
            "results": results[skip : skip + limit],
            "pagination": pagination(total, page, limit),
        }
