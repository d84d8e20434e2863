# src/memberhub/services/errors.py
"""Domain errors raised by the networking, forum and resource engines.

Each error carries the HTTP status the API layer should answer with; the
application-level exception handler in ``memberhub.main`` does the mapping.
"""

from __future__ import annotations

from fastapi import status


class MemberHubError(Exception):
    """Base class for errors surfaced directly to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MemberHubError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(MemberHubError):
    """The referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(MemberHubError):
    """The acting member lacks rights on the entity."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(MemberHubError):
    """Uniqueness or lifecycle violation."""

    status_code = status.HTTP_400_BAD_REQUEST


class StateError(MemberHubError):
    """Operation not allowed in the entity's current state (e.g. locked topic)."""

    status_code = status.HTTP_403_FORBIDDEN
