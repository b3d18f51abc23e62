"""CMS access layer for blog posts.

Every read goes through a ``CachedQueryExecutor`` under a fixed cache key,
so identical queries share one in-flight request and reuse the result for
the TTL of their class (posts, post detail, metadata). Date-range and draft
listings are not cached. Mutations bypass the cache and, on success, drop
every cached listing they could have made stale.

Failures never escape: each operation returns a ``QueryResult`` whose value
degrades to an empty list / ``None`` / ``False`` and whose ``error`` carries
the cause.

Usage:
    from blog_dashboard import CMSConfig, PostsAPI

    async with PostsAPI(CMSConfig.from_env()) as api:
        result = await api.fetch_all_posts()
        if not result.ok:
            ...
        for post in result.value:
            print(post.title)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, Optional, TypeVar, Union

from blog_dashboard.core.exceptions import CMSError, DemoModeError
from blog_dashboard.core.executor import CachedQueryExecutor
from blog_dashboard.core.models import (
    BlogPost,
    CMSConfig,
    PaginatedPosts,
    PostInput,
    PostMetadata,
    PostStatus,
    QueryResult,
)
from blog_dashboard.posts.search import DateLike, to_utc_bound
from blog_dashboard.store.base import DocumentStore
from blog_dashboard.store.demo_data import demo_documents
from blog_dashboard.store.memory_store import InMemoryDocumentStore
from blog_dashboard.store.query import DocumentQuery, Projection
from blog_dashboard.store.sanity_store import SanityDocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ALL_POSTS_KEY = "all-posts"
POSTS_METADATA_KEY = "posts-metadata"
POSTS_COUNT_KEY = "posts-count"
POST_KEY_PREFIX = "post-"
POSTS_PAGE_KEY_PREFIX = "posts-page-"

FEATURED_IMAGE = Projection(
    "featuredImage",
    (Projection("asset", ("_id", "url"), dereference=True), "alt"),
)

POST_FIELDS = (
    "_id",
    "_type",
    "_createdAt",
    "_updatedAt",
    "title",
    "slug",
    "excerpt",
    "publishedAt",
    "scheduledDate",
    "status",
    "tags",
    "category",
    "author",
    FEATURED_IMAGE,
    "seo",
)

POST_DETAIL_FIELDS = POST_FIELDS + ("content",)

METADATA_FIELDS = ("_id", "title", "slug", "publishedAt", "status", "tags")

CALENDAR_FIELDS = ("_id", "_createdAt", "_updatedAt", "title", "slug", "publishedAt", "status")

DRAFT_FIELDS = ("_id", "_createdAt", "_updatedAt", "title", "slug", "excerpt", "status", "tags")


def post_key(slug: str) -> str:
    return f"{POST_KEY_PREFIX}{slug}"


def posts_page_key(page: int, limit: int) -> str:
    return f"{POSTS_PAGE_KEY_PREFIX}{page}-{limit}"


def _posts() -> DocumentQuery:
    return DocumentQuery.of_type("post")


def _newest_first(query: DocumentQuery) -> DocumentQuery:
    return query.order_by("publishedAt", descending=True).order_by("_createdAt", descending=True)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PostsAPI:
    """Typed operations over the blog posts stored in the CMS."""

    def __init__(
        self,
        config: Optional[CMSConfig] = None,
        store: Optional[DocumentStore] = None,
        executor: Optional[CachedQueryExecutor] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the access layer.

        Args:
            config: CMS configuration (read from the environment by default)
            store: Remote document store (a Sanity store built from config by
                default; unused in demo mode)
            executor: Cache/deduplication executor (a fresh one by default)
            clock: Source of the timestamps stamped on mutations
        """
        self.config = config if config is not None else CMSConfig.from_env()
        self.executor = executor if executor is not None else CachedQueryExecutor()
        self.clock = clock
        self._demo_store: Optional[InMemoryDocumentStore] = None

        if self.config.is_demo_mode:
            logger.warning("Sanity project ID not configured. Using demo mode.")
            self._demo_store = InMemoryDocumentStore(demo_documents())
            self.store = store
        else:
            self.store = store if store is not None else SanityDocumentStore(self.config)

    @property
    def is_demo_mode(self) -> bool:
        return self._demo_store is not None

    async def fetch_all_posts(self) -> QueryResult[list[BlogPost]]:
        """All posts, newest publication first."""
        query = _newest_first(_posts()).project(*POST_FIELDS)
        return await self._read(
            "fetch_all_posts",
            lambda: self._run(ALL_POSTS_KEY, query, self.config.ttl_posts, _parse_posts),
            empty=[],
        )

    async def fetch_post_by_slug(self, slug: str) -> QueryResult[Optional[BlogPost]]:
        """Single post with full content, or ``None`` if no post has ``slug``."""
        query = _posts().where("slug.current", "==", slug).first_only().project(*POST_DETAIL_FIELDS)
        return await self._read(
            "fetch_post_by_slug",
            lambda: self._run(post_key(slug), query, self.config.ttl_post_detail, _parse_post),
            empty=None,
        )

    async def fetch_posts_paginated(self, page: int = 1, limit: int = 10) -> QueryResult[PaginatedPosts]:
        """One page of posts plus the total post count.

        The page and the count are fetched concurrently and cached under
        separate keys.

        Args:
            page: 1-based page number
            limit: Page size

        Raises:
            ValueError: If page or limit is below 1
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be >= 1")

        offset = (page - 1) * limit
        page_query = _newest_first(_posts()).slice(offset, limit).project(*POST_FIELDS)
        count_query = _posts().counted()

        async def load() -> PaginatedPosts:
            posts, total = await asyncio.gather(
                self._run(posts_page_key(page, limit), page_query, self.config.ttl_posts, _parse_posts),
                self._run(POSTS_COUNT_KEY, count_query, self.config.ttl_metadata, int),
            )
            return PaginatedPosts(
                posts=posts,
                total=total,
                has_more=offset + limit < total,
                page=page,
                limit=limit,
            )

        return await self._read(
            "fetch_posts_paginated",
            load,
            empty=PaginatedPosts(posts=[], total=0, has_more=False, page=page, limit=limit),
        )

    async def fetch_posts_metadata(self) -> QueryResult[list[PostMetadata]]:
        """Lightweight projection of every post for fast initial rendering."""
        query = _newest_first(_posts()).project(*METADATA_FIELDS)
        return await self._read(
            "fetch_posts_metadata",
            lambda: self._run(POSTS_METADATA_KEY, query, self.config.ttl_metadata, _parse_metadata),
            empty=[],
        )

    async def fetch_posts_by_date_range(self, start: DateLike, end: DateLike) -> QueryResult[list[BlogPost]]:
        """Posts published within ``[start, end]``, oldest first. Not cached.

        Plain dates cover the whole day, so ``end=date(2024, 1, 31)``
        includes posts published at any time on January 31st.
        """
        query = (
            _posts()
            .where("publishedAt", ">=", to_utc_bound(start, end=False))
            .where("publishedAt", "<=", to_utc_bound(end, end=True))
            .order_by("publishedAt")
            .project(*CALENDAR_FIELDS)
        )
        return await self._read(
            "fetch_posts_by_date_range",
            lambda: self._run(None, query, 0, _parse_posts),
            empty=[],
        )

    async def fetch_draft_posts(self) -> QueryResult[list[BlogPost]]:
        """Draft posts, most recently edited first. Not cached."""
        query = (
            _posts()
            .where("status", "==", "draft")
            .order_by("_updatedAt", descending=True)
            .project(*DRAFT_FIELDS)
        )
        return await self._read(
            "fetch_draft_posts",
            lambda: self._run(None, query, 0, _parse_posts),
            empty=[],
        )

    async def create_post(self, data: Union[PostInput, dict[str, Any]]) -> QueryResult[Optional[BlogPost]]:
        """Create a post, stamping its creation and update times.

        Returns:
            Result holding the created post as stored, or ``None`` on failure
        """
        if self.is_demo_mode:
            return self._refuse_in_demo("create_post", None)

        async def create() -> BlogPost:
            now = self.clock().isoformat()
            doc = {
                "_type": "post",
                **_coerce_input(data).to_document(),
                "_createdAt": now,
                "_updatedAt": now,
            }
            return BlogPost.model_validate(await self.store.create(doc))

        result = await self._read("create_post", create, empty=None)
        if result.ok:
            self.invalidate_posts()
        return result

    async def update_post(
        self, post_id: str, updates: Union[PostInput, dict[str, Any]]
    ) -> QueryResult[Optional[BlogPost]]:
        """Set the supplied fields on a post and refresh its update time.

        Returns:
            Result holding the updated post, or ``None`` on failure
        """
        if self.is_demo_mode:
            return self._refuse_in_demo("update_post", None)

        async def update() -> BlogPost:
            fields = _coerce_input(updates).to_document()
            fields["_updatedAt"] = self.clock().isoformat()
            return BlogPost.model_validate(await self.store.patch(post_id, fields))

        result = await self._read("update_post", update, empty=None)
        if result.ok:
            self.invalidate_posts()
        return result

    async def delete_post(self, post_id: str) -> QueryResult[bool]:
        """Permanently delete a post.

        Returns:
            Result holding True on success, False on failure
        """
        if self.is_demo_mode:
            return self._refuse_in_demo("delete_post", False)

        async def delete() -> bool:
            await self.store.delete(post_id)
            return True

        result = await self._read("delete_post", delete, empty=False)
        if result.ok:
            self.invalidate_posts()
        return result

    async def bulk_update_status(
        self, post_ids: list[str], status: Union[PostStatus, str]
    ) -> QueryResult[list[str]]:
        """Set the status of several posts at once.

        Publishing also stamps ``publishedAt`` with the current time. Posts
        are patched concurrently; one failure does not stop the others.

        Args:
            post_ids: Posts to update
            status: New status

        Returns:
            Result holding the ids that were updated; ``error`` names the
            posts that were not

        Raises:
            ValueError: If ``status`` is not a known post status
        """
        status = PostStatus(status)
        if self.is_demo_mode:
            return self._refuse_in_demo("bulk_update_status", [])

        now = self.clock().isoformat()
        fields: dict[str, Any] = {"status": status.value, "_updatedAt": now}
        if status == PostStatus.PUBLISHED:
            fields["publishedAt"] = now
        return await self._bulk("bulk_update_status", post_ids, lambda post_id: self.store.patch(post_id, fields))

    async def bulk_delete(self, post_ids: list[str]) -> QueryResult[list[str]]:
        """Permanently delete several posts.

        Returns:
            Result holding the ids that were deleted; ``error`` names the
            posts that were not
        """
        if self.is_demo_mode:
            return self._refuse_in_demo("bulk_delete", [])
        return await self._bulk("bulk_delete", post_ids, self.store.delete)

    async def publish_due_posts(self, now: Optional[datetime] = None) -> QueryResult[list[str]]:
        """Publish every scheduled post whose scheduled date has passed.

        Each due post gets ``status="published"`` and ``publishedAt`` set
        to ``now``.

        Args:
            now: Reference instant (the API clock by default)

        Returns:
            Result holding the ids of the published posts
        """
        if self.is_demo_mode:
            return self._refuse_in_demo("publish_due_posts", [])

        moment = to_utc_bound(now if now is not None else self.clock())
        query = (
            _posts()
            .where("status", "==", PostStatus.SCHEDULED.value)
            .where("scheduledDate", "<=", moment)
            .project("_id")
        )
        due = await self._read("publish_due_posts", lambda: self.store.fetch(query), empty=[])
        if not due.ok:
            return QueryResult([], due.error)

        post_ids = [doc["_id"] for doc in due.value or []]
        if post_ids:
            logger.info(f"Publishing {len(post_ids)} scheduled posts")
        stamp = moment.isoformat()
        fields = {"status": PostStatus.PUBLISHED.value, "publishedAt": stamp, "_updatedAt": stamp}
        return await self._bulk("publish_due_posts", post_ids, lambda post_id: self.store.patch(post_id, fields))

    def invalidate_posts(self) -> None:
        """Drop every cached post listing, page, count and detail."""
        for key in (ALL_POSTS_KEY, POSTS_METADATA_KEY, POSTS_COUNT_KEY):
            self.executor.invalidate(key)
        self.executor.invalidate_prefix(POSTS_PAGE_KEY_PREFIX)
        self.executor.invalidate_prefix(POST_KEY_PREFIX)

    async def close(self) -> None:
        """Close the underlying store."""
        if self.store is not None:
            await self.store.close()

    async def __aenter__(self) -> "PostsAPI":
        return self

    async def __aexit__(self, exc_type: type, exc_val: Exception, exc_tb: Any) -> None:
        await self.close()

    async def _run(
        self,
        key: Optional[str],
        query: DocumentQuery,
        ttl_minutes: float,
        parse: Callable[[Any], T],
    ) -> T:
        """Execute a query: demo data, uncached passthrough, or cached."""
        if self._demo_store is not None:
            return parse(await self._demo_store.fetch(query))

        async def load() -> T:
            return parse(await self.store.fetch(query))

        if key is None:
            return await load()
        return await self.executor.cached_query(key, load, ttl_minutes)

    async def _read(
        self,
        operation: str,
        action: Callable[[], Awaitable[T]],
        empty: Any,
    ) -> QueryResult[T]:
        try:
            return QueryResult(await action())
        except Exception as e:
            error = e if isinstance(e, CMSError) else CMSError(str(e), operation=operation)
            logger.error(f"Error in {operation}: {error}")
            return QueryResult(empty, error)

    async def _bulk(
        self,
        operation: str,
        post_ids: list[str],
        action: Callable[[str], Awaitable[Any]],
    ) -> QueryResult[list[str]]:
        """Run ``action`` for each post concurrently and collect the outcome."""
        post_ids = list(dict.fromkeys(post_ids))
        if not post_ids:
            return QueryResult([])

        outcomes = await asyncio.gather(*(action(post_id) for post_id in post_ids), return_exceptions=True)
        done = [post_id for post_id, outcome in zip(post_ids, outcomes) if not isinstance(outcome, BaseException)]
        failed = [post_id for post_id, outcome in zip(post_ids, outcomes) if isinstance(outcome, BaseException)]

        if done:
            self.invalidate_posts()
        if not failed:
            return QueryResult(done)

        for post_id, outcome in zip(post_ids, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Error in {operation} for {post_id}: {outcome}")
        error = CMSError(
            f"{len(failed)} of {len(post_ids)} posts failed: {', '.join(failed)}",
            operation=operation,
        )
        return QueryResult(done, error)

    def _refuse_in_demo(self, operation: str, empty: Any) -> QueryResult[Any]:
        error = DemoModeError("Mutations are disabled in demo mode", operation=operation)
        logger.warning(str(error))
        return QueryResult(empty, error)


def _coerce_input(data: Union[PostInput, dict[str, Any]]) -> PostInput:
    if isinstance(data, PostInput):
        return data
    return PostInput.model_validate(data)


def _parse_posts(raw: Any) -> list[BlogPost]:
    return [BlogPost.model_validate(doc) for doc in raw or []]


def _parse_post(raw: Any) -> Optional[BlogPost]:
    return BlogPost.model_validate(raw) if raw else None


def _parse_metadata(raw: Any) -> list[PostMetadata]:
    return [PostMetadata.model_validate(doc) for doc in raw or []]
