"""
Tests for the search cache and in-memory backend.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from xpertsearch.domains.search.models import Candidate, FilterSet

from .memory import InMemoryCacheBackend
from .models import CachedResult
from .search_cache import SearchCache


def _result(count: int = 3) -> CachedResult:
    products = [Candidate(id=str(i), shopify_product_id=i, title=f"P{i}") for i in range(count)]
    return CachedResult(
        products=products,
        total_count=count,
        search_id="hybrid-1700000000000",
        model_used="heuristic",
    )


@pytest.fixture
def cache() -> SearchCache:
    return SearchCache(InMemoryCacheBackend(), ttl_seconds=3600)


@pytest.fixture
def failing_backend() -> AsyncMock:
    """Create a backend whose every call fails."""
    mock = AsyncMock()
    for method in ("get", "set", "incr_member", "top_members", "delete_prefix"):
        getattr(mock, method).side_effect = ConnectionError("cache down")
    return mock


# --- Key Tests ---


def test_key_normalizes_query_and_filter_order() -> None:
    """Test case and tag order do not change the key."""
    a = SearchCache.generate_key("Red Dress", "shop-1", FilterSet(tags=["b", "a"], vendor="X"))
    b = SearchCache.generate_key("red dress", "shop-1", FilterSet(vendor="X", tags=["a", "b"]))
    assert a == b
    assert a.startswith("search:shop-1:")


def test_key_differs_by_shop_and_filters() -> None:
    """Test shop and filters partition the key space."""
    base = SearchCache.generate_key("lamp", "shop-1", FilterSet())
    assert base != SearchCache.generate_key("lamp", "shop-2", FilterSet())
    assert base != SearchCache.generate_key("lamp", "shop-1", FilterSet(available=True))


async def test_page_size_partitions_entries(cache: SearchCache) -> None:
    """Test an entry stored for one page size misses for another."""
    await cache.set("lamp", "shop-1", FilterSet(), _result(), limit=2)

    assert await cache.get("lamp", "shop-1", FilterSet(), limit=20) is None
    assert await cache.get("lamp", "shop-1", FilterSet(), limit=2) is not None


# --- Round-Trip Tests ---


async def test_set_then_get_round_trip(cache: SearchCache) -> None:
    """Test a stored first page is returned with the same products."""
    result = _result()
    await cache.set("lamp", "shop-1", FilterSet(), result)

    hit = await cache.get("lamp", "shop-1", FilterSet())

    assert hit is not None
    assert [p.id for p in hit.products] == [p.id for p in result.products]
    assert hit.model_used == "heuristic"


async def test_non_zero_offset_bypasses_cache(cache: SearchCache) -> None:
    """Test deep pages never hit or populate the cache."""
    await cache.set("lamp", "shop-1", FilterSet(), _result())
    assert await cache.get("lamp", "shop-1", FilterSet(), offset=5) is None

    await cache.set("sofa", "shop-1", FilterSet(), _result(), offset=20)
    assert await cache.get("sofa", "shop-1", FilterSet()) is None


async def test_empty_results_not_cached(cache: SearchCache) -> None:
    """Test empty result sets are never written."""
    await cache.set("nothing", "shop-1", FilterSet(), _result(0))
    assert await cache.get("nothing", "shop-1", FilterSet()) is None


async def test_read_hit_tracks_popularity(cache: SearchCache) -> None:
    """Test each cache hit increments the raw query's counter."""
    await cache.set("Red Dress", "shop-1", FilterSet(), _result())
    await cache.get("Red Dress", "shop-1", FilterSet())
    await cache.get("Red Dress", "shop-1", FilterSet())
    await cache.get("missing", "shop-1", FilterSet())

    popular = await cache.popular_queries("shop-1")

    assert [(p.query, p.count) for p in popular] == [("Red Dress", 2)]


async def test_clear_shop_only_drops_that_shop(cache: SearchCache) -> None:
    """Test shop invalidation leaves other tenants untouched."""
    await cache.set("lamp", "shop-1", FilterSet(), _result())
    await cache.set("lamp", "shop-2", FilterSet(), _result())

    removed = await cache.clear_shop("shop-1")

    assert removed == 1
    assert await cache.get("lamp", "shop-1", FilterSet()) is None
    assert await cache.get("lamp", "shop-2", FilterSet()) is not None


# --- Fail-Open Tests ---


async def test_backend_failure_is_a_miss(failing_backend: AsyncMock) -> None:
    """Test a failing backend degrades to pass-through."""
    cache = SearchCache(failing_backend)

    await cache.set("lamp", "shop-1", FilterSet(), _result())
    assert await cache.get("lamp", "shop-1", FilterSet()) is None
    assert await cache.popular_queries("shop-1") == []
    assert await cache.clear_shop("shop-1") == 0
    await cache.track_query("lamp", "shop-1")


async def test_disabled_cache() -> None:
    """Test a cache without a backend is a no-op."""
    cache = SearchCache(None)
    await cache.set("lamp", "shop-1", FilterSet(), _result())
    assert cache.enabled is False
    assert await cache.get("lamp", "shop-1", FilterSet()) is None


async def test_corrupt_entry_is_a_miss() -> None:
    """Test an unreadable stored payload is treated as a miss."""
    backend = InMemoryCacheBackend()
    cache = SearchCache(backend)
    await backend.set(SearchCache.generate_key("lamp", "shop-1"), "not json", 60)

    assert await cache.get("lamp", "shop-1") is None


# --- In-Memory Backend Tests ---


async def test_memory_backend_expiry() -> None:
    """Test entries past their TTL are dropped on read."""
    backend = InMemoryCacheBackend()
    await backend.set("k", "v", ttl_seconds=-1)
    assert await backend.get("k") is None


async def test_memory_backend_evicts_oldest() -> None:
    """Test the oldest entry is evicted when full."""
    backend = InMemoryCacheBackend(max_size=2)
    await backend.set("a", "1", 60)
    await backend.set("b", "2", 60)
    await backend.set("c", "3", 60)

    assert await backend.get("a") is None
    assert await backend.get("c") == "3"
    assert backend.stats()["size"] == 2


# --- Health Tests ---


async def test_health_reports_backend_state(failing_backend: AsyncMock) -> None:
    """Test health distinguishes a disabled, reachable and failing backend."""
    failing_backend.ping.side_effect = ConnectionError("cache down")

    assert await SearchCache(None).health() == "disabled"
    assert await SearchCache(InMemoryCacheBackend()).health() == "ok"
    assert await SearchCache(failing_backend).health() == "unavailable"
