"""Blog Dashboard - data access, caching and planning for a headless-CMS blog."""

from blog_dashboard.core import (
    AuthenticationError,
    BlogPost,
    CachedQueryExecutor,
    CalendarEvent,
    CMSConfig,
    CMSError,
    DemoModeError,
    DocumentStoreError,
    NotFoundError,
    PaginatedPosts,
    PlannedPost,
    PostInput,
    PostMetadata,
    PostStatus,
    QueryResult,
    RateLimitError,
    RequestDeduplicator,
    StorageError,
    TimeoutError,
    TTLCache,
)
from blog_dashboard.planning import FileStorage, MemoryStorage, PlanningStore
from blog_dashboard.posts import PostFilters, PostsAPI, SortBy, filter_posts
from blog_dashboard.store import (
    DocumentQuery,
    DocumentStore,
    InMemoryDocumentStore,
    SanityDocumentStore,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Caching
    "TTLCache",
    "RequestDeduplicator",
    "CachedQueryExecutor",
    # Models
    "CMSConfig",
    "BlogPost",
    "PostInput",
    "PostMetadata",
    "PostStatus",
    "PaginatedPosts",
    "PlannedPost",
    "CalendarEvent",
    "QueryResult",
    # Exceptions
    "CMSError",
    "DocumentStoreError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
    "TimeoutError",
    "DemoModeError",
    "StorageError",
    # Stores
    "DocumentStore",
    "DocumentQuery",
    "InMemoryDocumentStore",
    "SanityDocumentStore",
    # Access layer
    "PostsAPI",
    "PostFilters",
    "SortBy",
    "filter_posts",
    # Planning
    "PlanningStore",
    "MemoryStorage",
    "FileStorage",
]
