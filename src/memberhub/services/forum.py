# src/memberhub/services/forum.py
"""Forum engine: categories, topics, threaded replies and their counters.

``Category.topics_count`` is a cached count of live topics. It is moved by
single-statement SQL updates on topic create and delete, and
:meth:`ForumService.reconcile_category_counts` rebuilds it from the topics
when drift is suspected.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from sqlalchemy import case, func, or_, update
from sqlalchemy.orm import Session

from memberhub.core.settings import settings
from memberhub.db.time import as_utc, utcnow
from memberhub.models import Category, Member, Reply, ReplyLike, Topic
from memberhub.services.capabilities import Actor
from memberhub.services.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from memberhub.services.listing import check_page, normalize_tags, pagination, tag_frequencies

logger = logging.getLogger(__name__)

TOPIC_FILTERS = ("recent", "popular", "unanswered")
CATEGORY_FIELDS = ("name", "description", "icon", "order", "is_active")
DELETED_REPLY_TEXT = "[This reply has been deleted]"
MIN_SEARCH_LENGTH = 2


def slugify(name: str) -> str:
    """Derive a URL slug from a category name."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _author(member: Member | None) -> dict[str, Any] | None:
    if member is None:
        return None
    return {"id": member.id, "name": member.name}


def category_view(category: Category) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "icon": category.icon,
        "description": category.description,
        "order": category.order,
        "is_active": category.is_active,
        "topics_count": category.topics_count,
    }


def reply_view(reply: Reply) -> dict[str, Any]:
    """Render a reply; deleted replies keep their place as tombstones."""
    if reply.is_deleted:
        return {
            "id": reply.id,
            "content": DELETED_REPLY_TEXT,
            "author": None,
            "parent_reply_id": reply.parent_reply_id,
            "likes_count": 0,
            "liked_by": [],
            "is_edited": False,
            "is_deleted": True,
            "created_at": reply.created_at,
        }
    return {
        "id": reply.id,
        "content": reply.content,
        "author": _author(reply.author),
        "parent_reply_id": reply.parent_reply_id,
        "likes_count": len(reply.likes),
        "liked_by": reply.liked_by,
        "is_edited": reply.is_edited,
        "is_deleted": False,
        "created_at": reply.created_at,
    }


def topic_summary(topic: Topic) -> dict[str, Any]:
    category = topic.category
    return {
        "id": topic.id,
        "title": topic.title,
        "author": _author(topic.author),
        "category": (
            {"id": category.id, "name": category.name, "slug": category.slug}
            if category is not None
            else None
        ),
        "tags": list(topic.tags or []),
        "views": topic.views,
        "replies_count": len(topic.live_replies),
        "is_pinned": topic.is_pinned,
        "is_locked": topic.is_locked,
        "last_activity": topic.last_activity,
        "last_reply_at": topic.last_reply_at,
        "last_reply_by": topic.last_reply_by,
        "created_at": topic.created_at,
    }


def topic_detail(topic: Topic) -> dict[str, Any]:
    detail = topic_summary(topic)
    detail["content"] = topic.content
    detail["replies"] = [reply_view(reply) for reply in topic.replies]
    return detail


class ForumService:
    """Operations on forum categories, topics and replies."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Lookups and counters
    # ------------------------------------------------------------------
    def _get_category(self, category_id: int) -> Category:
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError("Category not found")
        return category

    def _live_topic(self, topic_id: int) -> Topic:
        topic = self.db.get(Topic, topic_id)
        if topic is None or topic.is_deleted:
            raise NotFoundError("Topic not found")
        return topic

    def _live_reply(self, reply_id: int) -> Reply:
        reply = self.db.get(Reply, reply_id)
        if reply is None or reply.is_deleted or reply.topic.is_deleted:
            raise NotFoundError("Reply not found")
        return reply

    def _increment_topics_count(self, category_id: int) -> None:
        self.db.execute(
            update(Category)
            .where(Category.id == category_id)
            .values(topics_count=Category.topics_count + 1)
        )

    def _decrement_topics_count(self, category_id: int) -> None:
        current = self.db.query(Category.topics_count).filter(Category.id == category_id).scalar()
        if current is not None and current <= 0:
            logger.warning(
                "topics_count for category %s already %s; keeping it at zero",
                category_id,
                current,
            )
        self.db.execute(
            update(Category)
            .where(Category.id == category_id)
            .values(
                topics_count=case(
                    (Category.topics_count > 0, Category.topics_count - 1),
                    else_=0,
                )
            )
        )

    @staticmethod
    def _refresh_last_reply(topic: Topic) -> None:
        """Point the topic's last-reply fields at its newest live reply."""
        live = topic.live_replies
        if not live:
            topic.last_reply_at = None
            topic.last_reply_by = None
            topic.last_activity = topic.created_at
            return
        latest = max(live, key=lambda reply: (as_utc(reply.created_at), reply.id))
        topic.last_reply_at = latest.created_at
        topic.last_reply_by = latest.author_id
        topic.last_activity = latest.created_at

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------
    def list_categories(self, include_inactive: bool = False) -> list[Category]:
        query = self.db.query(Category)
        if not include_inactive:
            query = query.filter(Category.is_active.is_(True))
        return query.order_by(Category.order, Category.id).all()

    def add_category(
        self,
        actor: Actor,
        name: str,
        description: str | None = None,
        icon: str | None = None,
    ) -> Category:
        """Create a category at the end of the display order (admin only)."""
        actor.require_admin()
        name = (name or "").strip()
        slug = slugify(name)
        if not slug:
            raise ValidationError("Category name is required")
        if self.db.query(Category).filter(Category.slug == slug).first():
            raise ConflictError("Category already exists")

        last_order = self.db.query(func.max(Category.order)).scalar()
        category = Category(
            name=name,
            slug=slug,
            description=description,
            icon=icon,
            order=(last_order or 0) + 1,
        )
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info("Category %s (%s) created by member %s", category.id, slug, actor.member_id)
        return category

    def update_category(self, actor: Actor, category_id: int, patch: Mapping[str, Any]) -> Category:
        actor.require_admin()
        category = self._get_category(category_id)
        unknown = set(patch) - set(CATEGORY_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown category fields: {', '.join(sorted(unknown))}")

        if "name" in patch:
            name = (patch["name"] or "").strip()
            slug = slugify(name)
            if not slug:
                raise ValidationError("Category name is required")
            clash = (
                self.db.query(Category)
                .filter(Category.slug == slug, Category.id != category.id)
                .first()
            )
            if clash:
                raise ConflictError("Category already exists")
            category.name = name
            category.slug = slug
        for field in ("description", "icon", "order", "is_active"):
            if field in patch:
                setattr(category, field, patch[field])

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, actor: Actor, category_id: int) -> None:
        """Delete an empty category; one that still holds topics is kept."""
        actor.require_admin()
        category = self._get_category(category_id)
        self.db.refresh(category)
        if category.topics_count > 0:
            raise ConflictError("Cannot delete category with existing topics")
        self.db.delete(category)
        self.db.commit()
        logger.info("Category %s deleted by member %s", category_id, actor.member_id)

    def reconcile_category_counts(self) -> list[dict[str, Any]]:
        """Recompute every ``topics_count`` from the topics it caches.

        Returns one entry per category whose cached value had drifted.
        """
        live_counts = dict(
            self.db.query(Topic.category_id, func.count(Topic.id))
            .filter(Topic.is_deleted.is_(False), Topic.category_id.is_not(None))
            .group_by(Topic.category_id)
            .all()
        )
        drift = []
        for category in self.db.query(Category).order_by(Category.id):
            actual = live_counts.get(category.id, 0)
            if category.topics_count != actual:
                logger.warning(
                    "Category %s topics_count drifted: cached %s, actual %s",
                    category.slug,
                    category.topics_count,
                    actual,
                )
                drift.append(
                    {
                        "category_id": category.id,
                        "slug": category.slug,
                        "cached": category.topics_count,
                        "actual": actual,
                    }
                )
                category.topics_count = actual
        self.db.commit()
        return drift

    # ------------------------------------------------------------------
    # Topics
    # ------------------------------------------------------------------
    def create_topic(
        self,
        actor: Actor,
        title: str,
        content: str,
        category_id: int | None = None,
        tags: list[str] | None = None,
    ) -> Topic:
        title = (title or "").strip()
        content = (content or "").strip()
        if len(title) < settings.topic_title_min_length:
            raise ValidationError(
                f"Title must be at least {settings.topic_title_min_length} characters"
            )
        if len(content) < settings.topic_content_min_length:
            raise ValidationError(
                f"Content must be at least {settings.topic_content_min_length} characters"
            )
        if category_id is not None:
            self._get_category(category_id)

        now = utcnow()
        topic = Topic(
            title=title,
            content=content,
            author_id=actor.member_id,
            category_id=category_id,
            tags=normalize_tags(tags or [], settings.topic_max_tags),
            last_activity=now,
            created_at=now,
        )
        self.db.add(topic)
        self.db.flush()
        if category_id is not None:
            self._increment_topics_count(category_id)
        self.db.commit()
        self.db.refresh(topic)
        logger.info("Topic %s created by member %s", topic.id, actor.member_id)
        return topic

    def get_topic(self, topic_id: int) -> Topic:
        """Fetch a live topic, counting the fetch as a view."""
        topic = self._live_topic(topic_id)
        self.db.execute(update(Topic).where(Topic.id == topic.id).values(views=Topic.views + 1))
        self.db.commit()
        self.db.refresh(topic)
        return topic

    def delete_topic(self, topic_id: int, actor: Actor) -> None:
        """Soft-delete a topic and release its category slot."""
        topic = self._live_topic(topic_id)
        actor.require_self_or_moderator(topic.author_id, "topic")
        topic.is_deleted = True
        if topic.category_id is not None:
            self._decrement_topics_count(topic.category_id)
        self.db.commit()
        logger.info("Topic %s deleted by member %s", topic_id, actor.member_id)

    def lock_topic(self, topic_id: int, actor: Actor) -> Topic:
        """Close a topic to new replies; there is no unlock."""
        actor.require_moderator()
        topic = self._live_topic(topic_id)
        topic.is_locked = True
        self.db.commit()
        self.db.refresh(topic)
        logger.info("Topic %s locked by member %s", topic_id, actor.member_id)
        return topic

    def _set_pinned(self, topic_id: int, actor: Actor, pinned: bool) -> Topic:
        actor.require_moderator()
        topic = self._live_topic(topic_id)
        topic.is_pinned = pinned
        self.db.commit()
        self.db.refresh(topic)
        return topic

    def pin_topic(self, topic_id: int, actor: Actor) -> Topic:
        return self._set_pinned(topic_id, actor, True)

    def unpin_topic(self, topic_id: int, actor: Actor) -> Topic:
        return self._set_pinned(topic_id, actor, False)

    def list_topics(
        self,
        category_slug: str | None = None,
        filter_by: str = "recent",
        search: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Page through live topics; pinned topics always lead."""
        if filter_by not in TOPIC_FILTERS:
            raise ValidationError(f"Invalid filter: {filter_by}")
        limit = settings.forum_page_size if limit is None else limit
        check_page(page, limit)

        query = self.db.query(Topic).filter(Topic.is_deleted.is_(False))
        if category_slug:
            category = self.db.query(Category).filter(Category.slug == category_slug).first()
            if category is None:
                raise NotFoundError("Category not found")
            query = query.filter(Topic.category_id == category.id)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Topic.title.ilike(pattern), Topic.content.ilike(pattern)))

        if filter_by == "popular":
            order = (Topic.is_pinned.desc(), Topic.views.desc(), Topic.last_activity.desc())
        elif filter_by == "unanswered":
            query = query.filter(~Topic.replies.any(Reply.is_deleted.is_(False)))
            order = (Topic.is_pinned.desc(), Topic.created_at.desc())
        else:
            order = (Topic.is_pinned.desc(), Topic.last_activity.desc())

        total = query.count()
        topics = query.order_by(*order, Topic.id.desc()).offset((page - 1) * limit).limit(limit).all()
        return {
            "topics": [topic_summary(topic) for topic in topics],
            "pagination": pagination(total, page, limit),
        }

    def search_topics(
        self,
        query: str | None,
        limit: int = 10,
        category_id: int | None = None,
    ) -> list[Topic]:
        text = (query or "").strip()
        if len(text) < MIN_SEARCH_LENGTH:
            return []
        pattern = f"%{text}%"
        stmt = self.db.query(Topic).filter(
            Topic.is_deleted.is_(False),
            or_(Topic.title.ilike(pattern), Topic.content.ilike(pattern)),
        )
        if category_id is not None:
            stmt = stmt.filter(Topic.category_id == category_id)
        return stmt.order_by(Topic.last_activity.desc(), Topic.id.desc()).limit(limit).all()

    def _live_tag_sets(self) -> list[list[str]]:
        rows = (
            self.db.query(Topic.tags)
            .filter(Topic.is_deleted.is_(False))
            .order_by(Topic.id)
            .all()
        )
        return [row.tags for row in rows]

    def trending_tags(self, limit: int | None = None) -> list[dict[str, Any]]:
        """Most used tags over live topics, ties in first-seen order."""
        limit = settings.trending_tags_limit if limit is None else limit
        return tag_frequencies(self._live_tag_sets(), limit)

    def topic_filters(self) -> dict[str, Any]:
        return {
            "categories": [category_view(c) for c in self.list_categories()],
            "tags": tag_frequencies(self._live_tag_sets(), settings.filter_tags_limit),
            "filters": list(TOPIC_FILTERS),
        }

    def topic_form_options(self) -> dict[str, Any]:
        popular = tag_frequencies(self._live_tag_sets(), settings.form_tags_limit)
        return {
            "categories": [
                {"id": c.id, "name": c.name, "slug": c.slug} for c in self.list_categories()
            ],
            "suggested_tags": [entry["tag"] for entry in popular],
            "max_tags": settings.topic_max_tags,
        }

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------
    def _clean_reply_content(self, content: str) -> str:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Reply content is required")
        if len(content) > settings.reply_max_length:
            raise ValidationError(
                f"Reply cannot exceed {settings.reply_max_length} characters"
            )
        return content

    def add_reply(
        self,
        topic_id: int,
        actor: Actor,
        content: str,
        parent_reply_id: int | None = None,
    ) -> Reply:
        """Append a reply and move the topic's last-reply markers to it."""
        topic = self._live_topic(topic_id)
        if topic.is_locked:
            raise StateError("Topic is locked")
        content = self._clean_reply_content(content)

        if parent_reply_id is not None:
            parent = self.db.get(Reply, parent_reply_id)
            if parent is None or parent.is_deleted:
                raise NotFoundError("Parent reply not found")
            if parent.topic_id != topic.id:
                raise ValidationError("Parent reply belongs to a different topic")

        now = utcnow()
        reply = Reply(
            content=content,
            author_id=actor.member_id,
            parent_reply_id=parent_reply_id,
            created_at=now,
            updated_at=now,
        )
        topic.replies.append(reply)
        topic.last_activity = now
        topic.last_reply_at = now
        topic.last_reply_by = actor.member_id
        self.db.commit()
        self.db.refresh(reply)
        logger.info("Reply %s added to topic %s by member %s", reply.id, topic.id, actor.member_id)
        return reply

    def edit_reply(self, reply_id: int, actor: Actor, content: str) -> Reply:
        reply = self._live_reply(reply_id)
        if reply.author_id != actor.member_id:
            raise AuthorizationError("Not authorized to edit this reply")
        if reply.topic.is_locked:
            raise StateError("Topic is locked")
        reply.content = self._clean_reply_content(content)
        reply.is_edited = True
        self.db.commit()
        self.db.refresh(reply)
        return reply

    def delete_reply(self, reply_id: int, actor: Actor) -> None:
        reply = self._live_reply(reply_id)
        actor.require_self_or_moderator(reply.author_id, "reply")
        reply.is_deleted = True
        self._refresh_last_reply(reply.topic)
        self.db.commit()
        logger.info("Reply %s deleted by member %s", reply_id, actor.member_id)

    def like_reply(self, reply_id: int, actor: Actor) -> dict[str, Any]:
        """Toggle the actor's like on a reply."""
        reply = self._live_reply(reply_id)
        existing = next((like for like in reply.likes if like.member_id == actor.member_id), None)
        if existing is not None:
            reply.likes.remove(existing)
            liked = False
        else:
            reply.likes.append(ReplyLike(member_id=actor.member_id))
            liked = True
        self.db.commit()
        return {"liked": liked, "likes_count": len(reply.likes)}
