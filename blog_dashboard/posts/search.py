"""Client-side filtering and sorting of fetched posts."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Literal, Optional, Union

from blog_dashboard.core.models import BlogPost, PostStatus

DateLike = Union[datetime, date, str]


def to_utc_bound(value: DateLike, end: bool = False) -> datetime:
    """Turn a range bound into a UTC instant; whole days cover the full day.

    Naive datetimes and ISO strings without an offset are taken as UTC.

    Args:
        value: Date, datetime or ISO-8601 string
        end: Whether this is the upper bound (a bare date then means the
            last instant of that day)

    Raises:
        ValueError: If a string bound is not an ISO-8601 date or datetime
    """
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime.combine(value, time.max if end else time.min, tzinfo=UTC)


class SortBy(str, Enum):
    """Sort key for filtered posts."""

    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"
    UPDATED = "updated"


@dataclass
class PostFilters:
    """Search criteria; empty criteria match every post.

    Attributes:
        query: Case-insensitive text matched against title, excerpt,
            category and tags
        statuses: Keep posts with any of these statuses
        categories: Keep posts in any of these categories
        tags: Keep posts carrying at least one of these tags
        start: Earliest publication (or creation, if unpublished) date
        end: Latest publication (or creation) date; a bare date covers the
            whole day
        sort_by: ``newest``/``oldest`` order by creation time, ``title``
            alphabetically, ``updated`` by last edit
        sort_order: ``asc`` or ``desc``
    """

    query: str = ""
    statuses: list[PostStatus] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    start: Optional[DateLike] = None
    end: Optional[DateLike] = None
    sort_by: SortBy = SortBy.NEWEST
    sort_order: Literal["asc", "desc"] = "desc"

    @property
    def is_active(self) -> bool:
        """Whether any criterion narrows the result."""
        return bool(
            self.query.strip()
            or self.statuses
            or self.categories
            or self.tags
            or self.start is not None
            or self.end is not None
        )


def filter_posts(posts: list[BlogPost], filters: PostFilters) -> list[BlogPost]:
    """Apply search criteria and ordering to already-fetched posts.

    Args:
        posts: Posts to filter (not modified)
        filters: Criteria to apply

    Returns:
        Matching posts in the requested order
    """
    result = list(posts)

    text = filters.query.strip().casefold()
    if text:
        result = [p for p in result if _matches_text(p, text)]

    if filters.statuses:
        wanted = {PostStatus(s) for s in filters.statuses}
        result = [p for p in result if p.status in wanted]

    if filters.categories:
        result = [p for p in result if p.category in filters.categories]

    if filters.tags:
        result = [p for p in result if p.tags and any(tag in p.tags for tag in filters.tags)]

    if filters.start is not None or filters.end is not None:
        start = to_utc_bound(filters.start) if filters.start is not None else None
        end = to_utc_bound(filters.end, end=True) if filters.end is not None else None
        result = [
            p
            for p in result
            if (start is None or _post_date(p) >= start) and (end is None or _post_date(p) <= end)
        ]

    reverse = filters.sort_order == "desc"
    sort_by = SortBy(filters.sort_by)
    if sort_by == SortBy.TITLE:
        result.sort(key=lambda p: p.title.casefold(), reverse=reverse)
    elif sort_by == SortBy.UPDATED:
        result.sort(key=lambda p: to_utc_bound(p.updated_at), reverse=reverse)
    else:
        result.sort(key=lambda p: to_utc_bound(p.created_at), reverse=reverse)
    return result


def _matches_text(post: BlogPost, text: str) -> bool:
    fields = [post.title, post.excerpt or "", post.category or "", *(post.tags or [])]
    return any(text in value.casefold() for value in fields)


def _post_date(post: BlogPost) -> datetime:
    return to_utc_bound(post.published_at or post.created_at)
