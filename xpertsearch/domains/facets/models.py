"""
Facet Models - Aggregated counts for result filtering UIs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FacetValue(BaseModel):
    """Count of candidates sharing one value."""

    value: str
    count: int
    label: str | None = None


class PriceRangeFacet(BaseModel):
    """Price bucket with the number of candidates inside it."""

    min: float
    max: float
    count: int
    label: str


class AvailabilityFacet(BaseModel):
    in_stock: int = 0
    out_of_stock: int = 0


class SaleFacet(BaseModel):
    on_sale: int = 0
    regular_price: int = 0


class FacetSet(BaseModel):
    """Facets derived from a candidate superset. Never persisted."""

    vendors: list[FacetValue] = Field(default_factory=list)
    product_types: list[FacetValue] = Field(default_factory=list)
    tags: list[FacetValue] = Field(default_factory=list)
    price_ranges: list[PriceRangeFacet] = Field(default_factory=list)
    availability: AvailabilityFacet = Field(default_factory=AvailabilityFacet)
    on_sale: SaleFacet = Field(default_factory=SaleFacet)
