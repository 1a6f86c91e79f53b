"""
Cache Models - Cached search payloads and popularity entries.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from xpertsearch.domains.search.models import Candidate


class CachedResult(BaseModel):
    """Full ranked result list for a query, before sorting and pagination."""

    products: list[Candidate] = Field(default_factory=list)
    total_count: int = 0
    search_id: str = ""
    model_used: str = "none"
    reasoning: str | None = None
    cached_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PopularQuery(BaseModel):
    """A query and how often it was served from cache."""

    query: str
    count: int
