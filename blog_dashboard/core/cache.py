"""In-memory TTL cache for CMS query results."""

import logging
import math
import time
from typing import Any, Callable, Optional

from cachetools import Cache
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 5.0


class CacheEntry(BaseModel):
    """Cached value with the time it was stored and its lifetime.

    Attributes:
        data: The cached value
        timestamp: Cache clock reading when the value was stored
        ttl: Lifetime in seconds
    """

    data: Any
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class TTLCache:
    """Key/value cache where every entry carries its own time-to-live.

    Expired entries are not swept in the background: a read of an expired
    key drops that entry, and ``cleanup()`` drops all of them. Capacity is
    unbounded.

    Example:
        >>> cache = TTLCache()
        >>> cache.set("all-posts", posts, ttl_minutes=5)
        >>> cache.get("all-posts")
    """

    def __init__(self, timer: Callable[[], float] = time.monotonic) -> None:
        """Initialize cache.

        Args:
            timer: Clock returning seconds; injectable for tests
        """
        self.timer = timer
        self._entries: Cache = Cache(maxsize=math.inf)

    def set(self, key: str, value: Any, ttl_minutes: float = DEFAULT_TTL_MINUTES) -> None:
        """Store a value, replacing any existing entry for the key.

        Args:
            key: Cache key
            value: Value to store
            ttl_minutes: Time to live in minutes
        """
        self._entries[key] = CacheEntry(
            data=value, timestamp=self.timer(), ttl=ttl_minutes * 60
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value if present and not expired.

        Args:
            key: Cache key
            default: Returned on a miss

        Returns:
            Cached value, or ``default`` when missing or expired
        """
        entry: Optional[CacheEntry] = self._entries.get(key)
        if entry is None:
            return default

        if entry.is_expired(self.timer()):
            del self._entries[key]
            logger.debug(f"Cache entry expired: {key}")
            return default

        return entry.data

    def delete(self, key: str) -> bool:
        """Drop a single entry.

        Returns:
            True if an entry was removed
        """
        return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        stale = [key for key in self._entries if key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def keys(self) -> list[str]:
        """Keys currently stored, expired or not."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet evicted."""
        return len(self._entries)

    def cleanup(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed
        """
        now = self.timer()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Cache cleanup removed {len(expired)} expired entries")
        return len(expired)
