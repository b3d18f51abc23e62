"""Tests for in-flight request deduplication."""

import asyncio

import pytest

from blog_dashboard.core import RequestDeduplicator


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_run():
    """Test concurrent calls for a key share a single run."""
    dedup = RequestDeduplicator()
    release = asyncio.Event()
    calls = 0

    async def producer():
        nonlocal calls
        calls += 1
        await release.wait()
        return {"posts": 3}

    first = asyncio.create_task(dedup.run("all-posts", producer))
    second = asyncio.create_task(dedup.run("all-posts", producer))
    await asyncio.sleep(0)

    assert dedup.is_pending("all-posts")
    assert dedup.pending_count() == 1

    release.set()
    results = await asyncio.gather(first, second)

    assert calls == 1
    assert results[0] == results[1] == {"posts": 3}
    assert results[0] is results[1]
    assert not dedup.is_pending("all-posts")


@pytest.mark.asyncio
async def test_distinct_keys_run_independently():
    """Test different keys never share a run."""
    dedup = RequestDeduplicator()
    calls = []

    async def producer(name):
        calls.append(name)
        await asyncio.sleep(0)
        return name

    results = await asyncio.gather(
        dedup.run("a", lambda: producer("a")),
        dedup.run("b", lambda: producer("b")),
    )

    assert results == ["a", "b"]
    assert sorted(calls) == ["a", "b"]


@pytest.mark.asyncio
async def test_settled_key_starts_fresh_run():
    """Test a call after the run settles starts a new run."""
    dedup = RequestDeduplicator()
    calls = 0

    async def producer():
        nonlocal calls
        calls += 1
        return calls

    assert await dedup.run("k", producer) == 1
    assert await dedup.run("k", producer) == 2
    assert dedup.pending_count() == 0


@pytest.mark.asyncio
async def test_failure_reaches_every_caller_and_clears_registration():
    """Test a failure reaches every caller and the key is released."""
    dedup = RequestDeduplicator()
    release = asyncio.Event()
    calls = 0

    async def producer():
        nonlocal calls
        calls += 1
        await release.wait()
        raise ConnectionError("store unavailable")

    first = asyncio.create_task(dedup.run("k", producer))
    second = asyncio.create_task(dedup.run("k", producer))
    await asyncio.sleep(0)
    release.set()

    results = await asyncio.gather(first, second, return_exceptions=True)

    assert calls == 1
    assert all(isinstance(r, ConnectionError) for r in results)
    assert not dedup.is_pending("k")


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_run():
    """Test cancelling one caller leaves the shared run going for the others."""
    dedup = RequestDeduplicator()
    release = asyncio.Event()

    async def producer():
        await release.wait()
        return "done"

    impatient = asyncio.create_task(dedup.run("k", producer))
    patient = asyncio.create_task(dedup.run("k", producer))
    await asyncio.sleep(0)

    impatient.cancel()
    await asyncio.sleep(0)
    release.set()

    assert await patient == "done"
    assert impatient.cancelled()


@pytest.mark.asyncio
async def test_forget_unregisters_without_cancelling():
    """Test a forgotten run still completes for its callers while new calls start afresh."""
    dedup = RequestDeduplicator()
    release = asyncio.Event()
    runs = []

    async def producer():
        runs.append(len(runs) + 1)
        number = runs[-1]
        if number == 1:
            await release.wait()
        return number

    first = asyncio.create_task(dedup.run("all-posts", producer))
    await asyncio.sleep(0)

    assert dedup.forget("all-posts") is True
    assert dedup.forget("all-posts") is False

    assert await dedup.run("all-posts", producer) == 2
    release.set()
    assert await first == 1
    assert not dedup.is_pending("all-posts")
