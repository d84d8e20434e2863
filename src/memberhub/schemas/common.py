# src/memberhub/schemas/common.py
"""Schemas shared across the networking, forum and resource APIs."""

from datetime import datetime

from pydantic import BaseModel


class Pagination(BaseModel):
    """Page metadata returned alongside list results."""

    total: int
    page: int
    limit: int
    pages: int


class AuthorRef(BaseModel):
    """Minimal member reference embedded in forum and comment payloads."""

    id: int
    name: str


class MemberSummary(BaseModel):
    """Public member profile fields shown in network views."""

    id: int
    name: str
    title: str | None = None
    company: str | None = None
    industry: str | None = None
    last_active: datetime | None = None


class LikeToggleResponse(BaseModel):
    liked: bool
    likes_count: int


class MessageResponse(BaseModel):
    message: str
