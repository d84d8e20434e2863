# src/memberhub/schemas/forum.py
"""Forum-related Pydantic schemas.

Length rules for titles, content and replies are enforced by the forum
service so that they surface as 400 validation errors.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .common import AuthorRef, Pagination


class CategoryCreate(BaseModel):
    """Schema for creating a new forum category."""

    name: str
    description: str | None = None
    icon: str | None = None


class CategoryUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    icon: str | None = None
    order: int | None = None
    is_active: bool | None = None


class CategoryResponse(BaseModel):
    """Schema for category information returned by the API."""

    id: int
    name: str
    slug: str
    icon: str | None
    description: str | None
    order: int
    is_active: bool
    topics_count: int

    model_config = ConfigDict(from_attributes=True)


class CategoryRef(BaseModel):
    id: int
    name: str
    slug: str


class CategoryDrift(BaseModel):
    category_id: int
    slug: str
    cached: int
    actual: int


class TopicCreate(BaseModel):
    """Schema for opening a new topic."""

    title: str
    content: str
    category_id: int | None = Field(None, description="Category the topic is filed under")
    tags: list[str] = Field(default_factory=list)


class ReplyCreate(BaseModel):
    content: str
    parent_reply_id: int | None = Field(None, description="Reply being answered, if threaded")


class ReplyUpdate(BaseModel):
    content: str


class ReplyResponse(BaseModel):
    """Reply as rendered inside a topic; deleted replies appear as tombstones."""

    id: int
    content: str
    author: AuthorRef | None
    parent_reply_id: int | None
    likes_count: int
    liked_by: list[int]
    is_edited: bool
    is_deleted: bool
    created_at: datetime


class TopicSummary(BaseModel):
    id: int
    title: str
    author: AuthorRef | None
    category: CategoryRef | None
    tags: list[str]
    views: int
    replies_count: int
    is_pinned: bool
    is_locked: bool
    last_activity: datetime
    last_reply_at: datetime | None
    last_reply_by: int | None
    created_at: datetime


class TopicDetail(TopicSummary):
    content: str
    replies: list[ReplyResponse]


class TopicListResponse(BaseModel):
    topics: list[TopicSummary]
    pagination: Pagination


class TagCount(BaseModel):
    tag: str
    count: int


class ForumFilters(BaseModel):
    categories: list[CategoryResponse]
    tags: list[TagCount]
    filters: list[str]


class TopicFormOptions(BaseModel):
    categories: list[CategoryRef]
    suggested_tags: list[str]
    max_tags: int
