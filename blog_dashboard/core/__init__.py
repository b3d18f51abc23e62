"""Core abstractions and models."""

from blog_dashboard.core.cache import CacheEntry, TTLCache
from blog_dashboard.core.dedup import RequestDeduplicator
from blog_dashboard.core.exceptions import (
    AuthenticationError,
    CMSError,
    DemoModeError,
    DocumentStoreError,
    NotFoundError,
    RateLimitError,
    StorageError,
    TimeoutError,
)
from blog_dashboard.core.executor import CachedQueryExecutor
from blog_dashboard.core.models import (
    SEO,
    Author,
    BlogPost,
    CalendarEvent,
    CMSConfig,
    PaginatedPosts,
    PlannedPost,
    PlannedStatus,
    PostInput,
    PostMetadata,
    PostStatus,
    Priority,
    QueryResult,
)

__all__ = [
    # Caching
    "TTLCache",
    "CacheEntry",
    "RequestDeduplicator",
    "CachedQueryExecutor",
    # Exceptions
    "CMSError",
    "DocumentStoreError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "TimeoutError",
    "DemoModeError",
    "StorageError",
    # Models
    "CMSConfig",
    "BlogPost",
    "PostInput",
    "PostMetadata",
    "PostStatus",
    "Author",
    "SEO",
    "PaginatedPosts",
    "PlannedPost",
    "PlannedStatus",
    "Priority",
    "CalendarEvent",
    "QueryResult",
]
