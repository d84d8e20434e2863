"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from memberhub.core.security import decode_access_token, member_id_from_claims
from memberhub.db.session import get_db
from memberhub.models import Member
from memberhub.services.capabilities import Actor

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _credentials_error(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> Member:
    """Get the current authenticated member from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        db: Database session

    Returns:
        Member record for the authenticated identity

    Raises:
        HTTPException: If the token is missing or invalid, or the member is unknown
    """
    if credentials is None:
        raise _credentials_error("Not authenticated")
    try:
        claims = decode_access_token(credentials.credentials)
        member_id = member_id_from_claims(claims)
    except JWTError as err:
        raise _credentials_error() from err

    member = db.get(Member, member_id)
    if member is None:
        raise _credentials_error("User not found")
    return member


# Type alias for current user dependency
CurrentUserDep = Annotated[Member, Depends(get_current_user)]


def get_actor(current_user: CurrentUserDep) -> Actor:
    """Capability object for the authenticated member."""
    return Actor.for_member(current_user)


def get_current_admin(current_user: CurrentUserDep) -> Member:
    """Require the authenticated member to hold the admin role."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


ActorDep = Annotated[Actor, Depends(get_actor)]
AdminDep = Annotated[Member, Depends(get_current_admin)]
