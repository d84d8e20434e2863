# src/memberhub/services/capabilities.py
"""Capability object passed into every engine call.

The API layer builds one :class:`Actor` per request from the authenticated
member; engines ask it for permission instead of re-deriving roles per method.
"""

from __future__ import annotations

from dataclasses import dataclass

from memberhub.models import Connection, Member
from memberhub.models.member import ROLE_ADMIN, ROLE_MODERATOR, ROLE_USER
from memberhub.services.errors import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """Identity and role of the member performing an operation."""

    member_id: int
    role: str = ROLE_USER

    @classmethod
    def for_member(cls, member: Member) -> Actor:
        return cls(member_id=member.id, role=member.role)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_moderator(self) -> bool:
        return self.role in (ROLE_MODERATOR, ROLE_ADMIN)

    def require_admin(self) -> None:
        if not self.is_admin:
            raise AuthorizationError("Admin privileges required for this operation")

    def require_moderator(self) -> None:
        if not self.is_moderator:
            raise AuthorizationError("Moderator privileges required for this operation")

    def require_recipient(self, connection: Connection, action: str) -> None:
        """Only the recipient of a request may answer it."""
        if connection.recipient_id != self.member_id:
            raise AuthorizationError(f"Not authorized to {action} this request")

    def require_party(self, connection: Connection) -> None:
        """Either end of the edge may manage the relationship."""
        if not connection.involves(self.member_id):
            raise AuthorizationError("Not authorized to manage this connection")

    def require_self_or_admin(self, owner_id: int, what: str) -> None:
        if owner_id != self.member_id and not self.is_admin:
            raise AuthorizationError(f"Not authorized to modify this {what}")

    def require_self_or_moderator(self, owner_id: int, what: str) -> None:
        if owner_id != self.member_id and not self.is_moderator:
            raise AuthorizationError(f"Not authorized to modify this {what}")
