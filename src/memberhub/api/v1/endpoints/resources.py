# src/memberhub/api/v1/endpoints/resources.py
"""Resource library endpoints: catalog, engagement and comments."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from memberhub.api.v1.dependencies import ActorDep, CurrentUserDep, SessionDep
from memberhub.schemas.common import LikeToggleResponse, MessageResponse
from memberhub.schemas.resource import (
    AccessResponse,
    BookmarkToggleResponse,
    CommentCreate,
    CommentListResponse,
    CommenterResponse,
    CommentReplyCreate,
    CommentReplyResponse,
    CommentResponse,
    ResourceCreate,
    ResourceDetail,
    ResourceFilterOptions,
    ResourceListResponse,
    ResourceSummary,
    ViewResponse,
)
from memberhub.services.resources import (
    ResourceService,
    comment_reply_view,
    comment_view,
    resource_detail,
)

router = APIRouter(prefix="/resources", tags=["resources"])


def get_resources(db: SessionDep) -> ResourceService:
    return ResourceService(db)


ResourcesDep = Annotated[ResourceService, Depends(get_resources)]


@router.get("", response_model=ResourceListResponse)
async def search_resources(
    _current_user: CurrentUserDep,
    resources: ResourcesDep,
    search: str | None = None,
    resource_type: Annotated[str | None, Query(alias="type")] = None,
    level: str | None = None,
    category: str | None = None,
    exclusive: bool = False,
    sort: str = "newest",
    page: int = 1,
    limit: int | None = None,
) -> dict[str, Any]:
    """Search and filter the resource library."""
    return resources.search_resources(
        search=search,
        resource_type=resource_type,
        level=level,
        category=category,
        exclusive=exclusive,
        sort_by=sort,
        page=page,
        limit=limit,
    )


@router.get("/recent", response_model=list[ResourceSummary])
async def recent_resources(
    _current_user: CurrentUserDep,
    resources: ResourcesDep,
) -> list[dict[str, Any]]:
    return resources.recent_resources()


@router.get("/filter-options", response_model=ResourceFilterOptions)
async def filter_options(
    _current_user: CurrentUserDep,
    resources: ResourcesDep,
) -> dict[str, list[str]]:
    return resources.filter_options()


@router.post("", response_model=ResourceDetail, status_code=status.HTTP_201_CREATED)
async def create_resource(
    resource_data: ResourceCreate,
    actor: ActorDep,
    resources: ResourcesDep,
) -> dict[str, Any]:
    """Add a resource to the library (admin only)."""
    resource = resources.create_resource(actor, resource_data.model_dump())
    return resource_detail(resource, actor.member_id)


@router.get("/{resource_id}", response_model=ResourceDetail)
async def get_resource(
    resource_id: int,
    current_user: CurrentUserDep,
    resources: ResourcesDep,
) -> dict[str, Any]:
    return resources.get_resource(resource_id, current_user.id)


@router.post("/{resource_id}/access", response_model=AccessResponse)
async def record_access(resource_id: int, actor: ActorDep, resources: ResourcesDep) -> dict[str, Any]:
    first_access = resources.record_access(resource_id, actor)
    return {"message": "Resource access recorded", "first_access": first_access}


@router.post("/{resource_id}/view", response_model=ViewResponse)
async def track_view(
    resource_id: int,
    _current_user: CurrentUserDep,
    resources: ResourcesDep,
) -> dict[str, int]:
    return {"views": resources.track_view(resource_id)}


@router.post("/{resource_id}/like", response_model=LikeToggleResponse)
async def toggle_like(resource_id: int, actor: ActorDep, resources: ResourcesDep) -> dict[str, Any]:
    return resources.toggle_resource_like(resource_id, actor)


@router.post("/{resource_id}/bookmark", response_model=BookmarkToggleResponse)
async def toggle_bookmark(
    resource_id: int,
    actor: ActorDep,
    resources: ResourcesDep,
) -> dict[str, Any]:
    return resources.toggle_bookmark(resource_id, actor)


@router.get("/{resource_id}/comments", response_model=CommentListResponse)
async def get_comments(
    resource_id: int,
    _current_user: CurrentUserDep,
    resources: ResourcesDep,
    sort_by: str = "newest",
    page: int = 1,
    limit: int | None = None,
) -> dict[str, Any]:
    return resources.get_comments(resource_id, sort_by=sort_by, page=page, limit=limit)


@router.get("/{resource_id}/commenters", response_model=list[CommenterResponse])
async def get_commenters(
    resource_id: int,
    _current_user: CurrentUserDep,
    resources: ResourcesDep,
) -> list[dict[str, Any]]:
    return resources.get_commenters(resource_id)


@router.post(
    "/{resource_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    resource_id: int,
    comment_data: CommentCreate,
    actor: ActorDep,
    resources: ResourcesDep,
) -> dict[str, Any]:
    return comment_view(resources.add_comment(resource_id, actor, comment_data.comment))


@router.post("/{resource_id}/comments/{comment_id}/like", response_model=LikeToggleResponse)
async def like_comment(
    resource_id: int,
    comment_id: int,
    actor: ActorDep,
    resources: ResourcesDep,
) -> dict[str, Any]:
    return resources.like_comment(resource_id, comment_id, actor)


@router.post(
    "/{resource_id}/comments/{comment_id}/replies",
    response_model=CommentReplyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    resource_id: int,
    comment_id: int,
    reply_data: CommentReplyCreate,
    actor: ActorDep,
    resources: ResourcesDep,
) -> dict[str, Any]:
    reply = resources.reply_to_comment(resource_id, comment_id, actor, reply_data.text)
    return comment_reply_view(reply)


@router.delete("/{resource_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    resource_id: int,
    comment_id: int,
    actor: ActorDep,
    resources: ResourcesDep,
) -> dict[str, str]:
    """Delete a comment; allowed for its author or an admin."""
    resources.delete_comment(resource_id, comment_id, actor)
    return {"message": "Comment deleted"}
