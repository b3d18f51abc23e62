"""Local planning data and the content calendar."""

from blog_dashboard.planning.calendar_view import (
    build_calendar_events,
    events_by_day,
    load_month_events,
    month_bounds,
)
from blog_dashboard.planning.storage import FileStorage, KeyValueStorage, MemoryStorage
from blog_dashboard.planning.store import PLANNED_POSTS_KEY, PlanningStore

__all__ = [
    "PlanningStore",
    "PLANNED_POSTS_KEY",
    "KeyValueStorage",
    "MemoryStorage",
    "FileStorage",
    "build_calendar_events",
    "events_by_day",
    "load_month_events",
    "month_bounds",
]
