# src/memberhub/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import AuthorRef, LikeToggleResponse, MemberSummary, MessageResponse, Pagination
from .forum import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ReplyCreate,
    ReplyResponse,
    TopicCreate,
    TopicDetail,
)
from .network import (
    ConnectionRequestCreate,
    ConnectionResponse,
    RelationshipUpdate,
    SearchResponse,
)
from .resource import CommentCreate, CommentResponse, ResourceCreate, ResourceDetail

__all__ = [
    "AuthorRef", "LikeToggleResponse", "MemberSummary", "MessageResponse", "Pagination",
    "CategoryCreate", "CategoryResponse", "CategoryUpdate",
    "ReplyCreate", "ReplyResponse", "TopicCreate", "TopicDetail",
    "ConnectionRequestCreate", "ConnectionResponse", "RelationshipUpdate", "SearchResponse",
    "CommentCreate", "CommentResponse", "ResourceCreate", "ResourceDetail",
]
