"""Local planning store for planned posts.

The whole collection lives under a single storage key as one JSON list.
Every mutation reads the full list, changes it in memory and writes the
full list back. Two writers sharing the same storage can therefore lose
each other's updates; the store is meant for a single operator.
"""

import json
import logging
import uuid
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError

from blog_dashboard.core.models import PlannedPost
from blog_dashboard.planning.storage import KeyValueStorage

logger = logging.getLogger(__name__)

PLANNED_POSTS_KEY = "plannedPosts"


def _alias_map() -> dict[str, str]:
    # Python field name or storage alias -> storage alias
    aliases = {}
    for name, info in PlannedPost.model_fields.items():
        alias = info.alias or name
        aliases[name] = alias
        aliases[alias] = alias
    return aliases


_FIELD_ALIASES = _alias_map()


def _to_aliases(data: dict[str, Any]) -> dict[str, Any]:
    return {_FIELD_ALIASES.get(key, key): value for key, value in data.items()}


class PlanningStore:
    """CRUD over the planned posts kept in a ``KeyValueStorage``."""

    def __init__(self, storage: KeyValueStorage, key: str = PLANNED_POSTS_KEY) -> None:
        self.storage = storage
        self.key = key

    def get_planned_posts(self) -> list[PlannedPost]:
        """Load all planned posts.

        Returns:
            The stored posts; an empty list if nothing was stored yet or
            the stored data cannot be parsed
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []

        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise TypeError(f"expected a list, got {type(items).__name__}")
            return [PlannedPost.model_validate(item) for item in items]
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable planned posts under '{self.key}': {e}")
            return []

    def save_planned_posts(self, posts: list[PlannedPost]) -> None:
        """Replace the stored collection with ``posts``."""
        payload = [p.model_dump(mode="json", by_alias=True, exclude_none=True) for p in posts]
        self.storage.set_item(self.key, json.dumps(payload))

    def get_planned_post(self, post_id: str) -> Optional[PlannedPost]:
        for post in self.get_planned_posts():
            if post.id == post_id:
                return post
        return None

    def get_planned_posts_between(self, start: date, end: date) -> list[PlannedPost]:
        """Planned posts whose planned date falls within ``[start, end]``."""
        return [p for p in self.get_planned_posts() if start <= p.planned_date <= end]

    def add_planned_post(self, data: dict[str, Any]) -> PlannedPost:
        """Add a planned post under a newly generated id.

        Args:
            data: Post fields, by Python name or storage name; any ``id``
                supplied is replaced

        Returns:
            The created post

        Raises:
            ValidationError: If the fields do not form a valid planned post
        """
        post = PlannedPost.model_validate({**_to_aliases(data), "id": str(uuid.uuid4())})
        posts = self.get_planned_posts()
        posts.append(post)
        self.save_planned_posts(posts)
        return post

    def update_planned_post(self, post_id: str, updates: dict[str, Any]) -> Optional[PlannedPost]:
        """Shallow-merge ``updates`` into the post with ``post_id``.

        Returns:
            The updated post, or None (with nothing written) if no post has
            that id
        """
        posts = self.get_planned_posts()
        for index, post in enumerate(posts):
            if post.id == post_id:
                break
        else:
            return None

        merged = {
            **post.model_dump(by_alias=True, exclude_none=True),
            **_to_aliases(updates),
            "id": post_id,
        }
        posts[index] = PlannedPost.model_validate(merged)
        self.save_planned_posts(posts)
        return posts[index]

    def delete_planned_post(self, post_id: str) -> bool:
        """Remove the post with ``post_id``.

        Returns:
            True if a post was removed; False (with nothing written) otherwise
        """
        posts = self.get_planned_posts()
        remaining = [p for p in posts if p.id != post_id]
        if len(remaining) == len(posts):
            return False

        self.save_planned_posts(remaining)
        return True
