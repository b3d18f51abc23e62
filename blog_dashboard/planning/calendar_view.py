"""Content calendar: CMS posts and planned posts merged into dated events."""

import calendar
from datetime import UTC, date, datetime, time
from typing import TYPE_CHECKING

from blog_dashboard.core.models import (
    BlogPost,
    CalendarEvent,
    PlannedPost,
    PostStatus,
    QueryResult,
)
from blog_dashboard.planning.store import PlanningStore

if TYPE_CHECKING:
    from blog_dashboard.posts.api import PostsAPI


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last instant of a calendar month, in UTC."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime.combine(date(year, month, 1), time.min, tzinfo=UTC)
    end = datetime.combine(date(year, month, last_day), time.max, tzinfo=UTC)
    return start, end


def build_calendar_events(
    posts: list[BlogPost],
    planned_posts: list[PlannedPost],
    start: date,
    end: date,
) -> list[CalendarEvent]:
    """Turn posts and planned posts into calendar events.

    Posts are dated by publication (creation when unpublished) and typed
    ``published`` or ``draft``. Planned posts are kept only when their
    planned date lies within ``[start, end]``.

    Args:
        posts: Posts already restricted to the period
        planned_posts: All planned posts
        start: First day of the period
        end: Last day of the period

    Returns:
        Post events followed by planned events
    """
    events = [
        CalendarEvent(
            id=post.id,
            title=post.title,
            event_date=(post.published_at or post.created_at).date(),
            type="published" if post.status == PostStatus.PUBLISHED else "draft",
            post=post,
        )
        for post in posts
    ]

    events.extend(
        CalendarEvent(
            id=planned.id,
            title=planned.title,
            event_date=planned.planned_date,
            type="planned",
            planned_post=planned,
        )
        for planned in planned_posts
        if start <= planned.planned_date <= end
    )
    return events


def events_by_day(events: list[CalendarEvent]) -> dict[date, list[CalendarEvent]]:
    days: dict[date, list[CalendarEvent]] = {}
    for event in events:
        days.setdefault(event.event_date, []).append(event)
    return days


async def load_month_events(
    api: "PostsAPI", planning: PlanningStore, year: int, month: int
) -> QueryResult[list[CalendarEvent]]:
    """Calendar events for one month.

    Planned posts are still returned when the CMS read fails; the result
    then carries the CMS error.
    """
    start, end = month_bounds(year, month)
    posts = await api.fetch_posts_by_date_range(start, end)
    events = build_calendar_events(posts.value, planning.get_planned_posts(), start.date(), end.date())
    return QueryResult(events, posts.error)
