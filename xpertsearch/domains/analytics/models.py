"""
Analytics Models - Search events emitted after each request.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class SearchEvent(BaseModel):
    """One served search, as reported to the analytics sink."""

    query: str
    shop_id: str
    results_count: int
    search_method: str
    processing_time_ms: int
    search_id: str
    filters: dict[str, Any] = Field(default_factory=dict)
    model_used: str | None = None
    session_id: str | None = None
    user_agent: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
