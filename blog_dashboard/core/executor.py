"""Cached, deduplicated execution of async queries."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional, TypeVar

from blog_dashboard.core.cache import DEFAULT_TTL_MINUTES, TTLCache
from blog_dashboard.core.dedup import RequestDeduplicator

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISS = object()


class CachedQueryExecutor:
    """Runs queries through a TTL cache and an in-flight deduplicator.

    For any key at most one fetch is in flight at a time, and a successful
    result is served from the cache for its TTL window. Failures are never
    cached and propagate to every caller that shared the failed fetch.

    Invalidating a key while its fetch is in flight detaches that fetch: its
    callers still get the result, but it is not cached, and later callers
    start a new fetch.

    Example:
        >>> executor = CachedQueryExecutor()
        >>> posts = await executor.cached_query("all-posts", load_posts, ttl_minutes=5)
    """

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        deduplicator: Optional[RequestDeduplicator] = None,
    ) -> None:
        """Initialize executor.

        Args:
            cache: TTL cache to use (a new one by default)
            deduplicator: Request deduplicator to use (a new one by default)
        """
        self.cache = cache if cache is not None else TTLCache()
        self.deduplicator = deduplicator if deduplicator is not None else RequestDeduplicator()

        # Bumped per key on invalidation; results fetched under an older
        # generation are not cached
        self._generations: dict[str, int] = {}

        # Metrics
        self._total_requests = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._joined_requests = 0

    async def cached_query(
        self,
        key: str,
        query_fn: Callable[[], Awaitable[T]],
        ttl_minutes: float = DEFAULT_TTL_MINUTES,
    ) -> T:
        """Return the cached value for ``key`` or fetch it with ``query_fn``.

        Args:
            key: Cache and deduplication key
            query_fn: Zero-argument coroutine function performing the fetch
            ttl_minutes: Lifetime of a successful result in the cache

        Returns:
            Query result

        Raises:
            Exception: Whatever ``query_fn`` raised
        """
        self._total_requests += 1

        cached = self.cache.get(key, _MISS)
        if cached is not _MISS:
            self._cache_hits += 1
            logger.debug(f"Cache hit: {key}")
            return cached

        if self.deduplicator.is_pending(key):
            self._joined_requests += 1
        else:
            self._cache_misses += 1
            logger.debug(f"Cache miss: {key}")

        generation = self._generations.get(key, 0)

        async def fetch_and_store() -> T:
            result = await query_fn()
            if self._generations.get(key, 0) == generation:
                self.cache.set(key, result, ttl_minutes)
            else:
                logger.debug(f"Discarding result invalidated while in flight: {key}")
            return result

        return await self.deduplicator.run(key, fetch_and_store)

    def invalidate(self, key: str) -> bool:
        """Drop the cached value for ``key`` and detach any in-flight fetch."""
        self._detach(key)
        return self.cache.delete(key)

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every cached value whose key starts with ``prefix``.

        In-flight fetches for matching keys are detached as well.

        Returns:
            Number of cached values removed
        """
        for key in self.deduplicator.pending_keys():
            if key.startswith(prefix):
                self._detach(key)
        return self.cache.invalidate_prefix(prefix)

    def clear(self) -> None:
        """Drop all cached values and detach every in-flight fetch."""
        for key in self.deduplicator.pending_keys():
            self._detach(key)
        self.cache.clear()

    def get_cache_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Request counts, hit rate and current cache size
        """
        hit_rate = (
            self._cache_hits / self._total_requests if self._total_requests > 0 else 0.0
        )

        return {
            "total_requests": self._total_requests,
            "cache_hits": self._cache_hits,
            "cache_misses": self._cache_misses,
            "joined_requests": self._joined_requests,
            "hit_rate": round(hit_rate, 3),
            "hit_rate_percent": round(hit_rate * 100, 1),
            "cache_size": self.cache.size(),
            "in_flight": self.deduplicator.pending_count(),
        }

    def reset_stats(self) -> None:
        """Reset cache statistics."""
        self._total_requests = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._joined_requests = 0

    def _detach(self, key: str) -> None:
        if self.deduplicator.forget(key):
            self._generations[key] = self._generations.get(key, 0) + 1
