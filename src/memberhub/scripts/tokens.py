# src/memberhub/scripts/tokens.py
"""
Developer helper that prints a bearer token for an existing member.

Token issuance belongs to the identity service in production; this script
only exists so the API can be exercised locally, e.g.::

    python -m memberhub.scripts.tokens 42 --expires-minutes 60
"""

import argparse
import sys

from sqlalchemy.orm import Session

from memberhub.core.security import create_access_token
from memberhub.db.session import SessionLocal
from memberhub.models import Member


def issue_token(db: Session, member_id: int, expires_minutes: int | None = None) -> str:
    """Return a signed token for ``member_id``.

    Args:
        db: Database session
        member_id: Member the token should authenticate as
        expires_minutes: Optional lifetime override

    Raises:
        LookupError: If no member has that id
    """
    if db.get(Member, member_id) is None:
        raise LookupError(f"Member {member_id} does not exist")
    return create_access_token(member_id, expires_minutes=expires_minutes)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a bearer token for a member.")
    parser.add_argument("member_id", type=int, help="Member primary key")
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        token = issue_token(db, args.member_id, args.expires_minutes)
    except LookupError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        db.close()

    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
