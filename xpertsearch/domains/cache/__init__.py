"""
Cache Domain - First-page search result caching and popularity counters.
"""

from .contracts import CacheBackend
from .memory import InMemoryCacheBackend
from .models import CachedResult, PopularQuery
from .search_cache import DEFAULT_TTL_SECONDS, SearchCache

__all__ = [
    "CacheBackend",
    "InMemoryCacheBackend",
    "CachedResult",
    "PopularQuery",
    "SearchCache",
    "DEFAULT_TTL_SECONDS",
]
