"""
Understanding Models - Structured interpretation of a shopper query.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from xpertsearch.domains.search.models import FilterSet


class QueryIntent(str, Enum):
    """What the shopper is trying to do."""

    PRODUCT_SEARCH = "product_search"
    QUESTION = "question"
    COMPARISON = "comparison"
    RECOMMENDATION = "recommendation"


class ParsedQuery(BaseModel):
    """Expanded query text, extracted filters and detected intent."""

    query_text: str
    filters: FilterSet = Field(default_factory=FilterSet)
    intent: QueryIntent = QueryIntent.PRODUCT_SEARCH
    confidence: float = Field(default=0.3, ge=0.0, le=1.0)

    @classmethod
    def fallback(cls, text: str) -> ParsedQuery:
        """Raw query, no filters, product search at low confidence."""
        return cls(query_text=text, intent=QueryIntent.PRODUCT_SEARCH, confidence=0.3)
