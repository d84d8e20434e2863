# src/memberhub/schemas/resource.py
"""Resource library and comment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from .common import AuthorRef, Pagination


class ResourceCreate(BaseModel):
    """Schema for adding a resource to the library."""

    title: str
    description: str
    category: str
    resource_type: str
    level: str = "intermediate"
    content: str | None = None
    author_name: str | None = None
    is_exclusive: bool = False
    read_time: int | None = Field(None, description="Estimated reading time in minutes")
    duration: int | None = Field(None, description="Running time in minutes for media")
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None
    download_url: str | None = None


class ResourceSummary(BaseModel):
    id: int
    title: str
    description: str
    category: str
    resource_type: str
    level: str
    is_exclusive: bool
    read_time: int | None
    duration: int | None
    tags: list[str]
    image_url: str | None
    publish_date: datetime
    is_new: bool
    views: int
    likes_count: int
    comment_count: int


class ResourceDetail(ResourceSummary):
    """Resource with body and the requesting member's engagement flags."""

    content: str
    author_name: str | None
    download_url: str | None
    downloads: int
    bookmarks_count: int
    is_liked: bool
    is_bookmarked: bool
    has_accessed: bool


class ResourceListResponse(BaseModel):
    resources: list[ResourceSummary]
    pagination: Pagination


class ResourceFilterOptions(BaseModel):
    types: list[str]
    levels: list[str]
    categories: list[str]


class AccessResponse(BaseModel):
    message: str
    first_access: bool


class ViewResponse(BaseModel):
    views: int


class BookmarkToggleResponse(BaseModel):
    bookmarked: bool
    bookmarks_count: int


class CommentCreate(BaseModel):
    comment: str


class CommentReplyCreate(BaseModel):
    text: str


class CommentReplyResponse(BaseModel):
    id: int
    author_id: int
    text: str
    created_at: datetime


class CommentResponse(BaseModel):
    id: int
    author: AuthorRef | None
    text: str
    likes_count: int
    liked_by: list[int]
    replies: list[CommentReplyResponse]
    created_at: datetime


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]
    pagination: Pagination


class CommenterResponse(BaseModel):
    member: AuthorRef | None
    comment_count: int
    last_comment_date: datetime
