# src/memberhub/services/listing.py
"""Small helpers shared by the engines' list and search views."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable
from typing import Any

from memberhub.services.errors import ValidationError


def normalize_tags(tags: Iterable[str], limit: int | None = None) -> list[str]:
    """Lowercase, trim and de-duplicate tags keeping first-seen order.

    Empty tags are dropped before ``limit`` is applied.
    """
    seen: list[str] = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValidationError("Tags must be strings")
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen[:limit] if limit is not None else seen


def tag_frequencies(tag_sets: Iterable[Iterable[str]], limit: int | None = None) -> list[dict[str, Any]]:
    """Count tag occurrences, most frequent first.

    ``Counter.most_common`` keeps insertion order for equal counts, so ties
    are broken by the order in which tags were first encountered.
    """
    counts: Counter[str] = Counter()
    for tags in tag_sets:
        counts.update(tags or [])
    return [{"tag": tag, "count": count} for tag, count in counts.most_common(limit)]


def check_page(page: int, limit: int) -> None:
    if page < 1 or limit < 1:
        raise ValidationError("Page and limit must be positive")


def pagination(total: int, page: int, limit: int) -> dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "pages": math.ceil(total / limit),
    }
