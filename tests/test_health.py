# tests/test_health.py
from typing import Any

from fastapi import status


def test_health_check(client: Any) -> None:
    """The health endpoint answers without authentication."""
    r = client.get("/health")
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"status": "ok"}


def test_root_describes_api(client: Any) -> None:
    r = client.get("/")
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["name"] == "Member Hub"
    assert data["docs"] == "/docs"
