"""
In-Memory Cache Backend - Process-local TTL cache with sorted-set counters.

Used when no Redis URL is configured and in tests.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

__all__ = ["InMemoryCacheBackend"]


@dataclass
class _Entry:
    value: str
    created_at: float
    expires_at: float
    hit_count: int = 0


class InMemoryCacheBackend:
    """
    In-memory cache with TTL.

    Features:
    - Automatic TTL expiration (checked on read)
    - Oldest-first eviction when full
    - Sorted-set emulation for popularity counters
    """

    def __init__(self, max_size: int = 5000) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of cached entries
        """
        self._cache: dict[str, _Entry] = {}
        self._sorted_sets: dict[str, dict[str, float]] = {}
        self._max_size = max_size

    async def get(self, key: str) -> str | None:
        """Get cached value if not expired."""
        entry = self._cache.get(key)
        if not entry:
            return None

        if time.monotonic() > entry.expires_at:
            del self._cache[key]
            logger.debug("Cache entry expired: %s", key)
            return None

        entry.hit_count += 1
        return entry.value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Cache a value."""
        if key not in self._cache and len(self._cache) >= self._max_size:
            self._evict_oldest()

        now = time.monotonic()
        self._cache[key] = _Entry(value=value, created_at=now, expires_at=now + ttl_seconds)

    async def incr_member(self, key: str, member: str, amount: float = 1.0) -> None:
        members = self._sorted_sets.setdefault(key, {})
        members[member] = members.get(member, 0.0) + amount

    async def top_members(self, key: str, limit: int) -> list[tuple[str, float]]:
        members = self._sorted_sets.get(key, {})
        ranked = sorted(members.items(), key=lambda item: item[1], reverse=True)
        return ranked[:limit]

    async def delete_prefix(self, prefix: str) -> int:
        """Invalidate entries whose key starts with ``prefix``."""
        keys = [k for k in self._cache if k.startswith(prefix)]
        for key in keys:
            del self._cache[key]
        for key in [k for k in self._sorted_sets if k.startswith(prefix)]:
            del self._sorted_sets[key]

        logger.info("Invalidated %d cache entries matching: %s*", len(keys), prefix)
        return len(keys)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._cache.clear()
        self._sorted_sets.clear()

    def _evict_oldest(self) -> None:
        """Evict the oldest 10% of entries to make room."""
        if not self._cache:
            return

        sorted_keys = sorted(self._cache, key=lambda k: self._cache[k].created_at)
        evict_count = max(1, len(sorted_keys) // 10)

        for key in sorted_keys[:evict_count]:
            del self._cache[key]

        logger.debug("Evicted %d oldest cache entries", evict_count)

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "size": len(self._cache),
            "max_size": self._max_size,
            "total_hits": sum(e.hit_count for e in self._cache.values()),
            "sorted_sets": len(self._sorted_sets),
        }
