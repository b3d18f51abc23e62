"""Tests for the cached query executor."""

import asyncio

import pytest

from blog_dashboard.core import CachedQueryExecutor, TTLCache


class CountingQuery:
    """Query function that records how often it ran."""

    def __init__(self, result=None, error: Exception | None = None, gate: asyncio.Event | None = None):
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.asyncio
async def test_second_call_is_served_from_cache(executor):
    """Test a second call within the TTL is served from cache."""
    query = CountingQuery(result=["p1", "p2"])

    first = await executor.cached_query("all-posts", query, ttl_minutes=5)
    second = await executor.cached_query("all-posts", query, ttl_minutes=5)

    assert first == second == ["p1", "p2"]
    assert query.calls == 1
    assert executor.cache.get("all-posts") == ["p1", "p2"]


@pytest.mark.asyncio
async def test_concurrent_calls_issue_one_fetch(executor):
    """Test concurrent cache misses issue a single fetch."""
    gate = asyncio.Event()
    query = CountingQuery(result={"total": 25}, gate=gate)

    pending = [
        asyncio.create_task(executor.cached_query("posts-count", query, ttl_minutes=15))
        for _ in range(2)
    ]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*pending)

    assert query.calls == 1
    assert results[0] == results[1] == {"total": 25}

    stats = executor.get_cache_stats()
    assert stats["cache_misses"] == 1
    assert stats["joined_requests"] == 1
    assert stats["in_flight"] == 0


@pytest.mark.asyncio
async def test_failure_is_not_cached_and_next_call_retries(executor):
    """Test failures are not cached and the next call fetches again."""
    query = CountingQuery(error=RuntimeError("boom"))

    with pytest.raises(RuntimeError):
        await executor.cached_query("all-posts", query)

    assert executor.cache.size() == 0
    assert not executor.deduplicator.is_pending("all-posts")

    query.error = None
    query.result = ["fresh"]

    assert await executor.cached_query("all-posts", query) == ["fresh"]
    assert query.calls == 2


@pytest.mark.asyncio
async def test_expired_result_is_refetched(executor, clock):
    """Test an expired result triggers a new fetch."""
    query = CountingQuery(result="v1")
    await executor.cached_query("post-hello", query, ttl_minutes=10)

    clock.advance(minutes=10, seconds=1)
    query.result = "v2"

    assert await executor.cached_query("post-hello", query, ttl_minutes=10) == "v2"
    assert query.calls == 2


@pytest.mark.asyncio
async def test_none_result_is_cached(executor):
    """Test a None result is cached like any other value."""
    query = CountingQuery(result=None)

    assert await executor.cached_query("post-missing", query) is None
    assert await executor.cached_query("post-missing", query) is None
    assert query.calls == 1


@pytest.mark.asyncio
async def test_invalidate_forces_refetch(executor):
    """Test invalidated keys are fetched again."""
    query = CountingQuery(result=[1])
    await executor.cached_query("posts-page-1-10", query)
    await executor.cached_query("posts-page-2-10", query)

    assert executor.invalidate_prefix("posts-page-") == 2
    await executor.cached_query("posts-page-1-10", query)

    assert query.calls == 3
    assert executor.invalidate("posts-page-1-10") is True


@pytest.mark.asyncio
async def test_cache_stats_and_reset(executor):
    """Test hit and miss statistics and their reset."""
    query = CountingQuery(result="x")
    await executor.cached_query("k", query)
    await executor.cached_query("k", query)

    stats = executor.get_cache_stats()
    assert stats["total_requests"] == 2
    assert stats["cache_hits"] == 1
    assert stats["cache_misses"] == 1
    assert stats["hit_rate"] == 0.5
    assert stats["hit_rate_percent"] == 50.0
    assert stats["cache_size"] == 1

    executor.reset_stats()
    assert executor.get_cache_stats()["total_requests"] == 0


def test_executor_creates_own_cache_by_default():
    """Test executors do not share a default cache."""
    first = CachedQueryExecutor()
    second = CachedQueryExecutor()

    assert first.cache is not second.cache
    assert isinstance(first.cache, TTLCache)


@pytest.mark.asyncio
async def test_invalidate_during_fetch_discards_result(executor):
    """Test a result invalidated while in flight reaches its caller but is not cached."""
    gate = asyncio.Event()
    query = CountingQuery(result=["stale"], gate=gate)

    pending = asyncio.create_task(executor.cached_query("all-posts", query))
    await asyncio.sleep(0)
    assert executor.invalidate("all-posts") is False
    gate.set()

    assert await pending == ["stale"]
    assert executor.cache.size() == 0


@pytest.mark.asyncio
async def test_call_after_invalidation_does_not_join_stale_fetch(executor):
    """Test a call made after invalidation starts its own fetch and keeps its result."""
    gate = asyncio.Event()
    stale = CountingQuery(result=["stale"], gate=gate)
    fresh = CountingQuery(result=["fresh"])

    pending = asyncio.create_task(executor.cached_query("all-posts", stale))
    await asyncio.sleep(0)
    executor.invalidate_prefix("all-")

    assert await executor.cached_query("all-posts", fresh) == ["fresh"]
    gate.set()
    assert await pending == ["stale"]

    assert executor.cache.get("all-posts") == ["fresh"]
    assert fresh.calls == 1


@pytest.mark.asyncio
async def test_clear_detaches_in_flight_fetches(executor):
    """Test clear() keeps in-flight results for every key out of the cache."""
    gate = asyncio.Event()
    query = CountingQuery(result=1, gate=gate)

    pending = [asyncio.create_task(executor.cached_query(key, query)) for key in ("a", "b")]
    await asyncio.sleep(0)
    executor.clear()
    gate.set()
    await asyncio.gather(*pending)

    assert executor.cache.size() == 0
    assert executor.deduplicator.pending_count() == 0
