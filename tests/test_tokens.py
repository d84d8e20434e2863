# tests/test_tokens.py
"""Tests for the developer token script."""

import pytest

from memberhub.core.security import decode_access_token
from memberhub.scripts.tokens import issue_token


def test_issue_token_for_existing_member(db_session, alice) -> None:
    token = issue_token(db_session, alice.id, expires_minutes=5)
    assert decode_access_token(token)["sub"] == str(alice.id)


def test_issue_token_for_unknown_member(db_session) -> None:
    with pytest.raises(LookupError):
        issue_token(db_session, 99999)
