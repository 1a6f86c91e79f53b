"""
Redis Cache Backend - Shared search cache and popularity counters.

One pooled client is created per process and injected into ``SearchCache``.
Errors surface as ``CacheError``; the cache layer above treats them as misses.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from xpertsearch.config.errors import CacheError

logger = logging.getLogger(__name__)

__all__ = ["RedisCacheBackend"]


class RedisCacheBackend:
    """
    Cache backend over redis-py asyncio.

    Example:
        >>> backend = RedisCacheBackend("redis://localhost:6379/0")
        >>> await backend.set("search:shop:abc", "{...}", 3600)
    """

    def __init__(
        self,
        url: str,
        socket_timeout: float = 5.0,
        scan_batch_size: int = 500,
        client: aioredis.Redis | None = None,
    ) -> None:
        """
        Initialize Redis backend.

        Args:
            url: Redis connection URL
            socket_timeout: Connect/read timeout in seconds
            scan_batch_size: SCAN page size for prefix deletion
            client: Pre-built client (mainly for tests)
        """
        self._url = url
        self._scan_batch_size = scan_batch_size
        self._client = client or aioredis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=socket_timeout,
            socket_timeout=socket_timeout,
        )

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except RedisError as e:
            raise CacheError("Redis GET failed", details={"key": key, "error": str(e)}) from e

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.setex(key, ttl_seconds, value)
        except RedisError as e:
            raise CacheError("Redis SETEX failed", details={"key": key, "error": str(e)}) from e

    async def incr_member(self, key: str, member: str, amount: float = 1.0) -> None:
        try:
            await self._client.zincrby(key, amount, member)
        except RedisError as e:
            raise CacheError("Redis ZINCRBY failed", details={"key": key, "error": str(e)}) from e

    async def top_members(self, key: str, limit: int) -> list[tuple[str, float]]:
        try:
            members = await self._client.zrevrange(key, 0, limit - 1, withscores=True)
        except RedisError as e:
            raise CacheError("Redis ZREVRANGE failed", details={"key": key, "error": str(e)}) from e
        return [(member, float(score)) for member, score in members]

    async def delete_prefix(self, prefix: str) -> int:
        """Delete matching keys in SCAN batches."""
        removed = 0
        batch: list[str] = []
        try:
            async for key in self._client.scan_iter(match=f"{prefix}*", count=self._scan_batch_size):
                batch.append(key)
                if len(batch) >= self._scan_batch_size:
                    removed += await self._client.delete(*batch)
                    batch = []
            if batch:
                removed += await self._client.delete(*batch)
        except RedisError as e:
            raise CacheError("Redis prefix delete failed", details={"prefix": prefix, "error": str(e)}) from e

        logger.info("Deleted %d Redis keys with prefix %s", removed, prefix)
        return removed

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        await self._client.aclose()
