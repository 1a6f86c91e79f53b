"""
Facets Domain - Result-set aggregation for filtering UIs.
"""

from .generator import (
    filter_facets_by_min_count,
    generate_facets,
    price_buckets,
    top_facets,
)
from .models import AvailabilityFacet, FacetSet, FacetValue, PriceRangeFacet, SaleFacet

__all__ = [
    "FacetSet",
    "FacetValue",
    "PriceRangeFacet",
    "AvailabilityFacet",
    "SaleFacet",
    "generate_facets",
    "price_buckets",
    "filter_facets_by_min_count",
    "top_facets",
]
