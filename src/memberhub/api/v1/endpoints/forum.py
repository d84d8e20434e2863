# src/memberhub/api/v1/endpoints/forum.py
"""Forum endpoints: categories, topics and replies."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from memberhub.api.v1.dependencies import ActorDep, AdminDep, CurrentUserDep, SessionDep
from memberhub.models import Category
from memberhub.schemas.common import LikeToggleResponse, MessageResponse
from memberhub.schemas.forum import (
    CategoryCreate,
    CategoryDrift,
    CategoryResponse,
    CategoryUpdate,
    ForumFilters,
    ReplyCreate,
    ReplyResponse,
    ReplyUpdate,
    TagCount,
    TopicCreate,
    TopicDetail,
    TopicFormOptions,
    TopicListResponse,
    TopicSummary,
)
from memberhub.services.forum import ForumService, reply_view, topic_detail, topic_summary

router = APIRouter(prefix="/forum", tags=["forum"])


def get_forum(db: SessionDep) -> ForumService:
    return ForumService(db)


ForumDep = Annotated[ForumService, Depends(get_forum)]


# Categories

@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(forum: ForumDep) -> list[Category]:
    """List active categories in display order."""
    return forum.list_categories()


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_category(
    category_data: CategoryCreate,
    actor: ActorDep,
    forum: ForumDep,
) -> Category:
    return forum.add_category(
        actor,
        category_data.name,
        description=category_data.description,
        icon=category_data.icon,
    )


@router.post("/categories/reconcile", response_model=list[CategoryDrift])
async def reconcile_categories(_admin: AdminDep, forum: ForumDep) -> list[dict[str, Any]]:
    """Rebuild cached topic counts and report any drift found."""
    return forum.reconcile_category_counts()


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    actor: ActorDep,
    forum: ForumDep,
) -> Category:
    return forum.update_category(actor, category_id, category_data.model_dump(exclude_unset=True))


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, str]:
    forum.delete_category(actor, category_id)
    return {"message": "Category deleted"}


# Topics

@router.get("/topics", response_model=TopicListResponse)
async def list_topics(
    forum: ForumDep,
    category: str | None = None,
    filter_by: Annotated[str, Query(alias="filter")] = "recent",
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict[str, Any]:
    return forum.list_topics(
        category_slug=category,
        filter_by=filter_by,
        search=search,
        page=page,
        limit=limit,
    )


@router.post(
    "/topics",
    response_model=TopicDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_topic(
    topic_data: TopicCreate,
    actor: ActorDep,
    forum: ForumDep,
) -> dict[str, Any]:
    """Open a new topic, optionally filed under a category."""
    topic = forum.create_topic(
        actor,
        topic_data.title,
        topic_data.content,
        category_id=topic_data.category_id,
        tags=topic_data.tags,
    )
    return topic_detail(topic)


@router.get("/topics/{topic_id}", response_model=TopicDetail)
async def get_topic(topic_id: int, _current_user: CurrentUserDep, forum: ForumDep) -> dict[str, Any]:
    """Fetch a topic with its replies; every fetch counts as a view."""
    return topic_detail(forum.get_topic(topic_id))


@router.delete("/topics/{topic_id}", response_model=MessageResponse)
async def delete_topic(topic_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, str]:
    forum.delete_topic(topic_id, actor)
    return {"message": "Topic deleted"}


@router.post("/topics/{topic_id}/lock", response_model=TopicSummary)
async def lock_topic(topic_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, Any]:
    return topic_summary(forum.lock_topic(topic_id, actor))


@router.post("/topics/{topic_id}/pin", response_model=TopicSummary)
async def pin_topic(topic_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, Any]:
    return topic_summary(forum.pin_topic(topic_id, actor))


@router.post("/topics/{topic_id}/unpin", response_model=TopicSummary)
async def unpin_topic(topic_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, Any]:
    return topic_summary(forum.unpin_topic(topic_id, actor))


# Replies

@router.post(
    "/topics/{topic_id}/replies",
    response_model=ReplyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_reply(
    topic_id: int,
    reply_data: ReplyCreate,
    actor: ActorDep,
    forum: ForumDep,
) -> dict[str, Any]:
    reply = forum.add_reply(
        topic_id,
        actor,
        reply_data.content,
        parent_reply_id=reply_data.parent_reply_id,
    )
    return reply_view(reply)


@router.put("/replies/{reply_id}", response_model=ReplyResponse)
async def edit_reply(
    reply_id: int,
    reply_data: ReplyUpdate,
    actor: ActorDep,
    forum: ForumDep,
) -> dict[str, Any]:
    return reply_view(forum.edit_reply(reply_id, actor, reply_data.content))


@router.delete("/replies/{reply_id}", response_model=MessageResponse)
async def delete_reply(reply_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, str]:
    forum.delete_reply(reply_id, actor)
    return {"message": "Reply deleted"}


@router.post("/replies/{reply_id}/like", response_model=LikeToggleResponse)
async def like_reply(reply_id: int, actor: ActorDep, forum: ForumDep) -> dict[str, Any]:
    """Toggle the current member's like on a reply."""
    return forum.like_reply(reply_id, actor)


# Discovery

@router.get("/search", response_model=list[TopicSummary])
async def search_topics(
    forum: ForumDep,
    query: str | None = None,
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
    category_id: int | None = None,
) -> list[dict[str, Any]]:
    return [topic_summary(t) for t in forum.search_topics(query, limit, category_id)]


@router.get("/filters", response_model=ForumFilters)
async def topic_filters(forum: ForumDep) -> dict[str, Any]:
    return forum.topic_filters()


@router.get("/topic-form-options", response_model=TopicFormOptions)
async def topic_form_options(_current_user: CurrentUserDep, forum: ForumDep) -> dict[str, Any]:
    return forum.topic_form_options()


@router.get("/trending-tags", response_model=list[TagCount])
async def trending_tags(
    forum: ForumDep,
    limit: Annotated[int | None, Query(ge=1)] = None,
) -> list[dict[str, Any]]:
    return forum.trending_tags(limit)
