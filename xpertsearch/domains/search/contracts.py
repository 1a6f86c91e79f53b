"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import SearchConfig, SearchRequest, SearchResult


@runtime_checkable
class SearchService(Protocol):
    """Contract for search entry points."""

    async def search(self, request: SearchRequest) -> SearchResult:
        """Execute search. Always returns a result."""
        ...


@runtime_checkable
class SearchConfigProvider(Protocol):
    """Contract for per-shop search configuration lookup."""

    async def get_config(self, shop_id: str) -> SearchConfig:
        """Resolve the search configuration for a shop."""
        ...
