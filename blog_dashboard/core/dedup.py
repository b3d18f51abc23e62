"""In-flight request deduplication."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Optional

logger = logging.getLogger(__name__)


class RequestDeduplicator:
    """Shares one in-flight fetch among all concurrent callers of a key.

    The first caller for a key starts the producer as a task; callers that
    arrive before it settles await that same task. The registration is
    dropped as soon as the task finishes, whether it succeeded or failed,
    so the next call starts a fresh fetch.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task] = {}

    async def run(self, key: str, producer: Callable[[], Awaitable[Any]]) -> Any:
        """Run ``producer`` for ``key`` unless a run is already in flight.

        Args:
            key: Deduplication key
            producer: Zero-argument coroutine function issuing the request

        Returns:
            Result of the single underlying run

        Raises:
            Exception: Whatever the producer raised, delivered to every caller
        """
        task = self._pending.get(key)
        if task is None:
            task = self.register(key, producer)
        else:
            logger.debug(f"Joining in-flight request: {key}")

        # A cancelled caller must not cancel the run other callers share
        return await asyncio.shield(task)

    def register(self, key: str, producer: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """Start ``producer`` and register it as the in-flight run for ``key``."""
        task = asyncio.ensure_future(producer())
        self._pending[key] = task
        task.add_done_callback(lambda done: self._release(key, done))
        return task

    def pending(self, key: str) -> Optional[asyncio.Task]:
        """Return the in-flight task for ``key``, if any."""
        return self._pending.get(key)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def pending_count(self) -> int:
        return len(self._pending)

    def pending_keys(self) -> list[str]:
        return list(self._pending)

    def forget(self, key: str) -> bool:
        """Unregister the in-flight run for ``key`` without cancelling it.

        Callers already awaiting the run still receive its result; the next
        call for ``key`` starts a fresh run.

        Returns:
            True if a run was registered
        """
        return self._pending.pop(key, None) is not None

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Mark the exception retrieved; callers receive it through shield()
        if not task.cancelled():
            task.exception()
