"""
Cache Contracts - Interface for key/value stores with sorted-set counters.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CacheBackend(Protocol):
    """
    Contract for cache storage.

    Implementations may raise on connectivity problems; ``SearchCache``
    treats any failure as a miss or a no-op.
    """

    async def get(self, key: str) -> str | None:
        """Get a value, or None if missing or expired."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with a fixed TTL."""
        ...

    async def incr_member(self, key: str, member: str, amount: float = 1.0) -> None:
        """Increment ``member``'s score in the sorted set ``key``."""
        ...

    async def top_members(self, key: str, limit: int) -> list[tuple[str, float]]:
        """Highest-scoring members of the sorted set ``key``."""
        ...

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``. Returns the count."""
        ...

    async def ping(self) -> bool:
        """True if the store is reachable."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
