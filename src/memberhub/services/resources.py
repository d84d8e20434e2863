# src/memberhub/services/resources.py
"""Resource library and engagement engine.

Besides the catalog itself this keeps two denormalized aggregates in step
with the comment rows:

* ``Resource.comment_count``: the number of comments on the resource.
* ``ResourceCommenter``: one row per (resource, author) holding how many
  comments that author has left and when the latest one was made. The row is
  removed when the author's last comment goes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import String, case, cast, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from memberhub.core.settings import settings
from memberhub.db.time import as_utc, utcnow
from memberhub.models import (
    CommentLike,
    CommentReply,
    Member,
    Resource,
    ResourceAccess,
    ResourceBookmark,
    ResourceComment,
    ResourceCommenter,
    ResourceLike,
)
from memberhub.models.resource import RESOURCE_LEVELS, RESOURCE_TYPES
from memberhub.services.capabilities import Actor
from memberhub.services.errors import NotFoundError, ValidationError
from memberhub.services.listing import check_page, normalize_tags, pagination

logger = logging.getLogger(__name__)

COMMENT_SORTS = ("newest", "oldest", "most_liked")
RESOURCE_SORTS = ("newest", "oldest", "alphabetical", "popular")
RECENT_RESOURCES_LIMIT = 5
OPTIONAL_RESOURCE_FIELDS = (
    "content",
    "author_name",
    "read_time",
    "duration",
    "image_url",
    "download_url",
)


def _author(member: Member | None) -> dict[str, Any] | None:
    if member is None:
        return None
    return {"id": member.id, "name": member.name}


def is_new(published: datetime | None) -> bool:
    if published is None:
        return False
    return as_utc(published) > utcnow() - timedelta(days=settings.new_resource_days)


def resource_summary(resource: Resource) -> dict[str, Any]:
    return {
        "id": resource.id,
        "title": resource.title,
        "description": resource.description,
        "category": resource.category,
        "resource_type": resource.resource_type,
        "level": resource.level,
        "is_exclusive": resource.is_exclusive,
        "read_time": resource.read_time,
        "duration": resource.duration,
        "tags": list(resource.tags or []),
        "image_url": resource.image_url,
        "publish_date": resource.publish_date,
        "is_new": is_new(resource.publish_date),
        "views": resource.views,
        "likes_count": len(resource.likes),
        "comment_count": resource.comment_count,
    }


def resource_detail(resource: Resource, member_id: int | None = None) -> dict[str, Any]:
    detail = resource_summary(resource)
    detail.update(
        content=resource.content,
        author_name=resource.author_name,
        download_url=resource.download_url,
        downloads=resource.downloads,
        bookmarks_count=len(resource.bookmarks),
        is_liked=member_id in resource.liked_by,
        is_bookmarked=member_id in resource.bookmarked_by,
        has_accessed=any(access.member_id == member_id for access in resource.accesses),
    )
    return detail


def comment_reply_view(reply: CommentReply) -> dict[str, Any]:
    return {
        "id": reply.id,
        "author_id": reply.author_id,
        "text": reply.text,
        "created_at": reply.created_at,
    }


def comment_view(comment: ResourceComment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "author": _author(comment.author),
        "text": comment.text,
        "likes_count": len(comment.likes),
        "liked_by": comment.liked_by,
        "replies": [comment_reply_view(reply) for reply in comment.replies],
        "created_at": comment.created_at,
    }


class ResourceService:
    """Catalog, engagement toggles and comment threads for resources."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _get_resource(self, resource_id: int) -> Resource:
        resource = self.db.get(Resource, resource_id)
        if resource is None:
            raise NotFoundError("Resource not found")
        return resource

    def _get_comment(self, resource: Resource, comment_id: int) -> ResourceComment:
        comment = self.db.get(ResourceComment, comment_id)
        if comment is None or comment.resource_id != resource.id:
            raise NotFoundError("Comment not found")
        return comment

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    def create_resource(self, actor: Actor, data: Mapping[str, Any]) -> Resource:
        """Add a resource to the library (admin only)."""
        actor.require_admin()
        required = {}
        for field in ("title", "description", "category"):
            value = (data.get(field) or "").strip()
            if not value:
                raise ValidationError(f"{field.capitalize()} is required")
            required[field] = value

        resource_type = (data.get("resource_type") or "").strip().lower()
        if resource_type not in RESOURCE_TYPES:
            raise ValidationError(f"Invalid resource type: {resource_type or '(missing)'}")
        level = (data.get("level") or "intermediate").strip().lower()
        if level not in RESOURCE_LEVELS:
            raise ValidationError(f"Invalid level: {level}")

        resource = Resource(
            **required,
            resource_type=resource_type,
            level=level,
            is_exclusive=bool(data.get("is_exclusive", False)),
            tags=normalize_tags(data.get("tags") or []),
            publish_date=data.get("publish_date") or utcnow(),
            **{
                field: data[field]
                for field in OPTIONAL_RESOURCE_FIELDS
                if data.get(field) is not None
            },
        )
        self.db.add(resource)
        self.db.commit()
        self.db.refresh(resource)
        logger.info("Resource %s created by member %s", resource.id, actor.member_id)
        return resource

    def get_resource(self, resource_id: int, member_id: int | None = None) -> dict[str, Any]:
        return resource_detail(self._get_resource(resource_id), member_id)

    def search_resources(
        self,
        search: str | None = None,
        resource_type: str | None = None,
        level: str | None = None,
        category: str | None = None,
        exclusive: bool = False,
        sort_by: str = "newest",
        page: int = 1,
        limit: int | None = None,
    ) -> dict[str, Any]:
        if sort_by not in RESOURCE_SORTS:
            raise ValidationError(f"Invalid sort option: {sort_by}")
        limit = settings.resources_page_size if limit is None else limit
        check_page(page, limit)

        query = self.db.query(Resource)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Resource.title.ilike(pattern),
                    Resource.description.ilike(pattern),
                    Resource.content.ilike(pattern),
                    cast(Resource.tags, String).ilike(pattern),
                )
            )
        if resource_type:
            query = query.filter(Resource.resource_type == resource_type.lower())
        if level:
            query = query.filter(Resource.level == level.lower())
        if category:
            query = query.filter(Resource.category == category)
        if exclusive:
            query = query.filter(Resource.is_exclusive.is_(True))

        total = query.count()
        if sort_by == "oldest":
            query = query.order_by(Resource.publish_date.asc(), Resource.id.asc())
        elif sort_by == "alphabetical":
            query = query.order_by(Resource.title.asc(), Resource.id.asc())
        elif sort_by == "popular":
            access_counts = (
                self.db.query(ResourceAccess.resource_id, func.count().label("accesses"))
                .group_by(ResourceAccess.resource_id)
                .subquery()
            )
            query = query.outerjoin(
                access_counts, access_counts.c.resource_id == Resource.id
            ).order_by(
                func.coalesce(access_counts.c.accesses, 0).desc(),
                Resource.publish_date.desc(),
            )
        else:
            query = query.order_by(Resource.publish_date.desc(), Resource.id.desc())

        resources = query.offset((page - 1) * limit).limit(limit).all()
        return {
            "resources": [resource_summary(resource) for resource in resources],
            "pagination": pagination(total, page, limit),
        }

    def recent_resources(self, limit: int = RECENT_RESOURCES_LIMIT) -> list[dict[str, Any]]:
        resources = (
            self.db.query(Resource)
            .order_by(Resource.publish_date.desc(), Resource.id.desc())
            .limit(limit)
            .all()
        )
        return [resource_summary(resource) for resource in resources]

    def filter_options(self) -> dict[str, list[str]]:
        types = self.db.query(Resource.resource_type).distinct().order_by(Resource.resource_type)
        categories = self.db.query(Resource.category).distinct().order_by(Resource.category)
        return {
            "types": [row.resource_type for row in types],
            "levels": list(RESOURCE_LEVELS),
            "categories": [row.category for row in categories],
        }

    def record_access(self, resource_id: int, actor: Actor) -> bool:
        """Remember that the actor opened the resource.

        Returns ``True`` the first time a member accesses it.
        """
        resource = self._get_resource(resource_id)
        if any(access.member_id == actor.member_id for access in resource.accesses):
            return False
        resource.accesses.append(ResourceAccess(member_id=actor.member_id))
        self.db.commit()
        return True

    def track_view(self, resource_id: int) -> int:
        resource = self._get_resource(resource_id)
        self.db.execute(
            update(Resource).where(Resource.id == resource.id).values(views=Resource.views + 1)
        )
        self.db.commit()
        self.db.refresh(resource)
        return resource.views

    # ------------------------------------------------------------------
    # Likes and bookmarks
    # ------------------------------------------------------------------
    def toggle_resource_like(self, resource_id: int, actor: Actor) -> dict[str, Any]:
        resource = self._get_resource(resource_id)
        existing = next((like for like in resource.likes if like.member_id == actor.member_id), None)
        if existing is not None:
            resource.likes.remove(existing)
        else:
            resource.likes.append(ResourceLike(member_id=actor.member_id))
        self.db.commit()
        return {"liked": existing is None, "likes_count": len(resource.likes)}

    def toggle_bookmark(self, resource_id: int, actor: Actor) -> dict[str, Any]:
        resource = self._get_resource(resource_id)
        existing = next((mark for mark in resource.bookmarks if mark.member_id == actor.member_id), None)
        if existing is not None:
            resource.bookmarks.remove(existing)
        else:
            resource.bookmarks.append(ResourceBookmark(member_id=actor.member_id))
        self.db.commit()
        return {"bookmarked": existing is None, "bookmarks_count": len(resource.bookmarks)}

    def like_comment(self, resource_id: int, comment_id: int, actor: Actor) -> dict[str, Any]:
        comment = self._get_comment(self._get_resource(resource_id), comment_id)
        existing = next((like for like in comment.likes if like.member_id == actor.member_id), None)
        if existing is not None:
            comment.likes.remove(existing)
        else:
            comment.likes.append(CommentLike(member_id=actor.member_id))
        self.db.commit()
        return {"liked": existing is None, "likes_count": len(comment.likes)}

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------
    @staticmethod
    def _clean_text(text: str, max_length: int, what: str) -> str:
        text = (text or "").strip()
        if not text:
            raise ValidationError(f"{what} text is required")
        if len(text) > max_length:
            raise ValidationError(f"{what} cannot exceed {max_length} characters")
        return text

    def _increment_commenter(self, resource_id: int, member_id: int, when: datetime) -> bool:
        result = self.db.execute(
            update(ResourceCommenter)
            .where(
                ResourceCommenter.resource_id == resource_id,
                ResourceCommenter.member_id == member_id,
            )
            .values(
                comment_count=ResourceCommenter.comment_count + 1,
                last_comment_date=when,
            )
        )
        return result.rowcount > 0

    def _bump_commenter(self, resource_id: int, member_id: int, when: datetime) -> None:
        """Count one more comment for the author, creating the roll-up row if needed."""
        if self._increment_commenter(resource_id, member_id, when):
            return
        try:
            with self.db.begin_nested():
                self.db.add(
                    ResourceCommenter(
                        resource_id=resource_id,
                        member_id=member_id,
                        comment_count=1,
                        last_comment_date=when,
                    )
                )
        except IntegrityError:
            # A concurrent first comment by the same author created the row.
            logger.info(
                "Commenter row for member %s on resource %s already exists, incrementing",
                member_id,
                resource_id,
            )
            self._increment_commenter(resource_id, member_id, when)

    def add_comment(self, resource_id: int, actor: Actor, text: str) -> ResourceComment:
        """Append a comment and bump the resource's comment aggregates."""
        resource = self._get_resource(resource_id)
        text = self._clean_text(text, settings.comment_max_length, "Comment")

        now = utcnow()
        comment = ResourceComment(author_id=actor.member_id, text=text, created_at=now)
        resource.comments.append(comment)
        self.db.flush()
        self.db.execute(
            update(Resource)
            .where(Resource.id == resource.id)
            .values(comment_count=Resource.comment_count + 1)
        )

        self._bump_commenter(resource.id, actor.member_id, now)

        self.db.commit()
        self.db.refresh(comment)
        logger.info(
            "Comment %s added to resource %s by member %s",
            comment.id,
            resource.id,
            actor.member_id,
        )
        return comment

    def delete_comment(self, resource_id: int, comment_id: int, actor: Actor) -> None:
        """Remove a comment; only its author or an admin may do so."""
        resource = self._get_resource(resource_id)
        comment = self._get_comment(resource, comment_id)
        actor.require_self_or_admin(comment.author_id, "comment")

        author_id = comment.author_id
        resource.comments.remove(comment)
        self.db.flush()

        if resource.comment_count <= 0:
            logger.warning(
                "comment_count for resource %s already %s; keeping it at zero",
                resource.id,
                resource.comment_count,
            )
        self.db.execute(
            update(Resource)
            .where(Resource.id == resource.id)
            .values(
                comment_count=case(
                    (Resource.comment_count > 0, Resource.comment_count - 1),
                    else_=0,
                )
            )
        )

        entry = self.db.get(ResourceCommenter, (resource.id, author_id))
        if entry is None:
            logger.warning(
                "No commenter roll-up for member %s on resource %s", author_id, resource.id
            )
        elif entry.comment_count <= 1:
            self.db.delete(entry)
        else:
            latest = (
                self.db.query(func.max(ResourceComment.created_at))
                .filter(
                    ResourceComment.resource_id == resource.id,
                    ResourceComment.author_id == author_id,
                )
                .scalar()
            )
            entry.comment_count = ResourceCommenter.comment_count - 1
            if latest is not None:
                entry.last_comment_date = latest

        self.db.commit()
        logger.info(
            "Comment %s deleted from resource %s by member %s",
            comment_id,
            resource.id,
            actor.member_id,
        )

    def reply_to_comment(
        self,
        resource_id: int,
        comment_id: int,
        actor: Actor,
        text: str,
    ) -> CommentReply:
        comment = self._get_comment(self._get_resource(resource_id), comment_id)
        text = self._clean_text(text, settings.comment_reply_max_length, "Reply")
        reply = CommentReply(author_id=actor.member_id, text=text)
        comment.replies.append(reply)
        self.db.commit()
        self.db.refresh(reply)
        return reply

    def get_comments(
        self,
        resource_id: int,
        sort_by: str = "newest",
        page: int = 1,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Sort every comment in memory, then slice out the requested page."""
        if sort_by not in COMMENT_SORTS:
            raise ValidationError(f"Invalid sort option: {sort_by}")
        limit = settings.comments_page_size if limit is None else limit
        check_page(page, limit)

        resource = self._get_resource(resource_id)
        comments = list(resource.comments)
        if sort_by == "oldest":
            comments.sort(key=lambda c: (as_utc(c.created_at), c.id))
        elif sort_by == "most_liked":
            comments.sort(key=lambda c: (len(c.likes), as_utc(c.created_at), c.id), reverse=True)
        else:
            comments.sort(key=lambda c: (as_utc(c.created_at), c.id), reverse=True)

        skip = (page - 1) * limit
        return {
            "comments": [comment_view(c) for c in comments[skip : skip + limit]],
            "pagination": pagination(len(comments), page, limit),
        }

    def get_commenters(self, resource_id: int) -> list[dict[str, Any]]:
        """Commenter roll-up entries, most recent commenter first."""
        resource = self._get_resource(resource_id)
        entries = (
            self.db.query(ResourceCommenter)
            .filter(ResourceCommenter.resource_id == resource.id)
            .order_by(ResourceCommenter.last_comment_date.desc())
            .all()
        )
        return [
            {
                "member": _author(entry.member),
                "comment_count": entry.comment_count,
                "last_comment_date": entry.last_comment_date,
            }
            for entry in entries
        ]
