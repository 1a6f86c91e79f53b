"""
Search Cache - Content-addressed cache for first-page hybrid results.

Keys are ``search:{shop_id}:{md5}`` over the lowercased query, the
sorted filter payload and the requested page size. Popularity counters live in ``popular:{shop_id}``.
Every backend failure degrades to a miss or a no-op.
"""

from __future__ import annotations

import hashlib
import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from xpertsearch.domains.search.models import FilterSet

from .models import CachedResult, PopularQuery

if TYPE_CHECKING:
    from .contracts import CacheBackend

logger = logging.getLogger(__name__)

__all__ = ["SearchCache", "DEFAULT_TTL_SECONDS"]

DEFAULT_TTL_SECONDS = 3600


class SearchCache:
    """
    Fail-open search result cache.

    Only first pages (``offset == 0``) are read or written, and empty
    results are never stored.

    Example:
        >>> cache = SearchCache(InMemoryCacheBackend())
        >>> await cache.set("red dress", "shop-1", FilterSet(), result)
        >>> hit = await cache.get("red dress", "shop-1", FilterSet())
    """

    def __init__(
        self,
        backend: CacheBackend | None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
    ) -> None:
        """
        Initialize search cache.

        Args:
            backend: Storage backend, or None to disable caching
            ttl_seconds: Fixed entry lifetime
        """
        self._backend = backend
        self._ttl = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._backend is not None

    @staticmethod
    def generate_key(
        query: str,
        shop_id: str,
        filters: FilterSet | None = None,
        limit: int | None = None,
    ) -> str:
        """Generate the cache key for a query, shop, filter set and page size."""
        payload = {
            "query": query.strip().lower(),
            "filters": (filters or FilterSet()).cache_payload(),
            "limit": limit,
        }
        digest = hashlib.md5(
            json.dumps(payload, sort_keys=True, separators=(",", ":")).encode()
        ).hexdigest()
        return f"search:{shop_id}:{digest}"

    @staticmethod
    def popularity_key(shop_id: str) -> str:
        return f"popular:{shop_id}"

    async def get(
        self,
        query: str,
        shop_id: str,
        filters: FilterSet | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> CachedResult | None:
        """Cached result for a first-page query, or None."""
        if self._backend is None or offset != 0:
            return None

        key = self.generate_key(query, shop_id, filters, limit)
        try:
            raw = await self._backend.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None

        if raw is None:
            logger.debug("Cache miss: %s", key)
            return None

        try:
            cached = CachedResult.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", key, e)
            return None

        logger.debug("Cache hit: %s (%d products)", key, len(cached.products))
        await self.track_query(query, shop_id)
        return cached

    async def set(
        self,
        query: str,
        shop_id: str,
        filters: FilterSet | None,
        result: CachedResult,
        offset: int = 0,
        limit: int | None = None,
    ) -> None:
        """Store a first-page result. Empty results are skipped."""
        if self._backend is None or offset != 0 or not result.products:
            return

        key = self.generate_key(query, shop_id, filters, limit)
        try:
            await self._backend.set(key, result.model_dump_json(), self._ttl)
            logger.debug("Cached %d products: %s (TTL: %ds)", len(result.products), key, self._ttl)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    async def track_query(self, query: str, shop_id: str) -> None:
        """Increment the popularity counter for the raw query."""
        if self._backend is None:
            return
        try:
            await self._backend.incr_member(self.popularity_key(shop_id), query)
        except Exception as e:
            logger.warning("Popularity tracking failed for shop %s: %s", shop_id, e)

    async def popular_queries(self, shop_id: str, limit: int = 10) -> list[PopularQuery]:
        """Most frequently served cached queries for a shop."""
        if self._backend is None:
            return []
        try:
            members = await self._backend.top_members(self.popularity_key(shop_id), limit)
        except Exception as e:
            logger.warning("Popular query lookup failed for shop %s: %s", shop_id, e)
            return []
        return [PopularQuery(query=member, count=int(score)) for member, score in members]

    async def clear_shop(self, shop_id: str) -> int:
        """Drop every cached result for a shop."""
        if self._backend is None:
            return 0
        try:
            removed = await self._backend.delete_prefix(f"search:{shop_id}:")
        except Exception as e:
            logger.warning("Cache clear failed for shop %s: %s", shop_id, e)
            return 0

        logger.info("Cleared %d cached searches for shop %s", removed, shop_id)
        return removed

    async def health(self) -> str:
        """Backend status: ``ok``, ``unavailable`` or ``disabled``."""
        if self._backend is None:
            return "disabled"
        try:
            reachable = await self._backend.ping()
        except Exception as e:
            logger.warning("Cache health check failed: %s", e)
            reachable = False
        return "ok" if reachable else "unavailable"

    async def close(self) -> None:
        if self._backend is not None:
            await self._backend.close()
