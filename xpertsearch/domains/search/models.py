"""
Search Models - Data types for the search domain.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from xpertsearch.domains.facets.models import FacetSet


class SearchStrategy(str, Enum):
    """Retrieval/ranking pipeline serving a request."""

    VECTOR = "vector"
    KEYWORD = "keyword"
    HYBRID = "hybrid"
    AI = "ai"


class SortBy(str, Enum):
    """Result ordering requested by the caller."""

    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    TITLE = "title"
    NEWEST = "newest"


class FilterSet(BaseModel):
    """Typed search filters. Unset fields impose no constraint."""

    price_min: float | None = None
    price_max: float | None = None
    vendor: str | None = None
    product_type: str | None = None
    tags: list[str] | None = None
    available: bool | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def is_empty(self) -> bool:
        return not self.cache_payload()

    def merged(self, other: FilterSet | None) -> FilterSet:
        """Overlay the set fields of ``other`` on top of this filter set."""
        if other is None:
            return self
        data = self.model_dump(exclude_none=True)
        data.update(other.model_dump(exclude_none=True))
        return FilterSet(**data)

    def cache_payload(self) -> dict[str, Any]:
        """Set fields only, in a JSON-stable form."""
        payload = self.model_dump(exclude_none=True)
        if "tags" in payload:
            payload["tags"] = sorted(payload["tags"])
        return dict(sorted(payload.items()))


class ProductVariant(BaseModel):
    """Purchasable variant of a product."""

    id: str
    title: str | None = None
    sku: str | None = None
    price: float | None = None
    compare_at_price: float | None = None
    available: bool = True
    inventory_quantity: int = 0
    image_url: str | None = None


class PriceRange(BaseModel):
    """Variant price range with optional sale bounds."""

    min: float
    max: float
    sale_min: float | None = None
    sale_max: float | None = None
    currency: str | None = None


class Candidate(BaseModel):
    """
    Product snapshot flowing through retrieval, fusion and ranking.

    ``similarity_score`` is overwritten by each stage: raw vector
    similarity, keyword score, then fused RRF score. The heuristic ranker
    writes its unbounded score to ``rank_score`` instead.
    """

    id: str
    shopify_product_id: int | None = None
    title: str = ""
    description: str | None = None
    vendor: str | None = None
    product_type: str | None = None
    tags: list[str] = Field(default_factory=list)
    image_url: str | None = None
    handle: str | None = None
    price_min: float | None = None
    price_max: float | None = None
    available: bool = True
    variants: list[ProductVariant] = Field(default_factory=list)
    price_range: PriceRange | None = None
    on_sale: bool = False
    created_at: datetime | None = None
    similarity_score: float = Field(default=0.0, ge=0.0, le=1.0)
    rank_score: float | None = None

    @property
    def identity(self) -> str:
        """De-duplication key shared by every retrieval source."""
        return f"{self.shopify_product_id}-{self.id}"


class FusedResult(BaseModel):
    """Candidates ordered by fused score."""

    candidates: list[Candidate] = Field(default_factory=list)
    vector_count: int = 0
    keyword_count: int = 0


class RankingOutcome(BaseModel):
    """Result of the ranking stage."""

    ranked_products: list[Candidate] = Field(default_factory=list)
    reasoning: str | None = None
    model_used: str = "none"


class SearchRequest(BaseModel):
    """Caller search request. One request drives one orchestration run."""

    query: str = Field(..., min_length=1)
    shop_id: str = Field(..., min_length=1)
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    sort_by: SortBy = SortBy.RELEVANCE
    filters: FilterSet = Field(default_factory=FilterSet)
    strategy: SearchStrategy | None = None
    session_id: str | None = None
    user_agent: str | None = None
    use_cache: bool = True
    debug: bool = False
    include_facets: bool = False

    model_config = {"frozen": True}


class SearchConfig(BaseModel):
    """Per-shop search configuration."""

    default_strategy: SearchStrategy = SearchStrategy.AI
    fallback_strategy: SearchStrategy = SearchStrategy.HYBRID
    vector_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    cache_ttl: int = 3600
    enable_analytics: bool = True


class ProductDTO(BaseModel):
    """Product shape exposed to callers."""

    id: str
    shopify_product_id: int | None = None
    title: str
    description: str | None = None
    handle: str | None = None
    vendor: str | None = None
    product_type: str | None = None
    tags: list[str] = Field(default_factory=list)
    price: dict[str, float | None] = Field(default_factory=dict)
    image_url: str | None = None
    available: bool = True
    on_sale: bool = False
    variants: list[ProductVariant] = Field(default_factory=list)
    similarity_score: float | None = None

    @classmethod
    def from_candidate(cls, candidate: Candidate, include_score: bool = False) -> ProductDTO:
        return cls(
            id=candidate.id,
            shopify_product_id=candidate.shopify_product_id,
            title=candidate.title,
            description=candidate.description,
            handle=candidate.handle,
            vendor=candidate.vendor,
            product_type=candidate.product_type,
            tags=list(candidate.tags),
            price={"min": candidate.price_min, "max": candidate.price_max},
            image_url=candidate.image_url,
            available=candidate.available,
            on_sale=candidate.on_sale,
            variants=list(candidate.variants),
            similarity_score=candidate.similarity_score if include_score else None,
        )


class QueryInfo(BaseModel):
    """How a query was interpreted and served."""

    original_query: str
    processed_query: str | None = None
    filters_applied: FilterSet | None = None
    search_method: SearchStrategy
    processing_time_ms: int = 0


class RankingInfo(BaseModel):
    """Which ranker ordered the results."""

    model_used: str
    reasoning: str | None = None


class SearchResult(BaseModel):
    """Caller-facing search response."""

    products: list[ProductDTO] = Field(default_factory=list)
    total_count: int = 0
    has_more: bool = False
    query_info: QueryInfo
    ranking_info: RankingInfo | None = None
    search_id: str
    facets: FacetSet | None = None
    debug_info: dict[str, Any] | None = None

    @property
    def search_method(self) -> SearchStrategy:
        return self.query_info.search_method

    @property
    def processing_time_ms(self) -> int:
        return self.query_info.processing_time_ms
