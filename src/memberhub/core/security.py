"""Bearer token helpers shared by the API layer and developer scripts."""
from __future__ import annotations

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from memberhub.core.settings import settings
from memberhub.db.time import utcnow


def create_access_token(member_id: int, *, expires_minutes: int | None = None) -> str:
    """Issue a signed JWT whose subject is the member identifier.

    Args:
        member_id: Primary key of the member the token represents.
        expires_minutes: Optional lifetime override in minutes.

    Returns:
        Encoded JWT string.
    """
    lifetime = expires_minutes or settings.access_token_expire_minutes
    payload = {
        "sub": str(member_id),
        "exp": utcnow() + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a JWT and return its claims.

    Raises:
        JWTError: If the signature, expiry or format is invalid.
    """
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def member_id_from_claims(claims: dict[str, Any]) -> int:
    """Extract the integer member id from decoded claims."""
    subject = claims.get("sub")
    if subject is None:
        raise JWTError("Token has no subject")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise JWTError("Token subject is not a member id") from err
