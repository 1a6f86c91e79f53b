"""
Facet Generator - Vendor/type/tag/price/availability aggregation.

Facets are computed over an unfiltered candidate superset so the counts
describe the whole query match space rather than the applied filters.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Iterable

from .models import (
    AvailabilityFacet,
    FacetSet,
    FacetValue,
    PriceRangeFacet,
    SaleFacet,
)

if TYPE_CHECKING:
    from xpertsearch.domains.search.models import Candidate

__all__ = [
    "generate_facets",
    "price_buckets",
    "filter_facets_by_min_count",
    "top_facets",
    "MAX_VENDORS",
    "MAX_PRODUCT_TYPES",
    "MAX_TAGS",
]

MAX_VENDORS = 15
MAX_PRODUCT_TYPES = 15
MAX_TAGS = 20


def generate_facets(candidates: Iterable[Candidate]) -> FacetSet:
    """Aggregate facet counts over ``candidates``."""
    products = list(candidates)
    if not products:
        return FacetSet()

    vendors: Counter[str] = Counter()
    types: Counter[str] = Counter()
    tags: Counter[str] = Counter()
    availability = AvailabilityFacet()
    sale = SaleFacet()

    for product in products:
        if product.vendor:
            vendors[product.vendor] += 1
        if product.product_type:
            types[product.product_type] += 1
        for tag in product.tags:
            if tag:
                tags[tag] += 1

        if product.available:
            availability.in_stock += 1
        else:
            availability.out_of_stock += 1

        if product.on_sale:
            sale.on_sale += 1
        else:
            sale.regular_price += 1

    return FacetSet(
        vendors=_top_values(vendors, MAX_VENDORS),
        product_types=_top_values(types, MAX_PRODUCT_TYPES),
        tags=_top_values(tags, MAX_TAGS),
        price_ranges=_price_range_facets(products),
        availability=availability,
        on_sale=sale,
    )


def _top_values(counts: Counter[str], limit: int) -> list[FacetValue]:
    # most_common keeps first-seen order for equal counts
    return [FacetValue(value=value, count=count) for value, count in counts.most_common(limit)]


def price_buckets(min_price: float, max_price: float) -> list[tuple[float, float]]:
    """
    Size-adaptive price buckets spanning ``min_price``..``max_price``.

    - range <= 50: three 20-wide buckets from the minimum
    - range <= 200: 25-wide buckets
    - otherwise: 0-20%, 20-50%, 50-80%, 80-100% of the range
    """
    spread = max_price - min_price

    if spread <= 50:
        buckets = [
            (min_price, min_price + 20),
            (min_price + 20, min_price + 40),
            (min_price + 40, max_price),
        ]
        return [(lo, hi) for lo, hi in buckets if lo < hi]

    if spread <= 200:
        buckets = []
        lower = min_price
        while lower < max_price:
            buckets.append((lower, min(lower + 25, max_price)))
            lower += 25
        return buckets

    marks = (0.0, 0.2, 0.5, 0.8)
    buckets = []
    for index, mark in enumerate(marks):
        lower = min_price + spread * mark
        upper = min_price + spread * marks[index + 1] if index + 1 < len(marks) else max_price
        buckets.append((lower, upper))
    return [(lo, hi) for lo, hi in buckets if lo < hi]


def _price_range_facets(products: list[Candidate]) -> list[PriceRangeFacet]:
    prices = sorted(p.price_min for p in products if p.price_min and p.price_min > 0)
    if not prices:
        return []

    low, high = prices[0], prices[-1]
    if low == high:
        return [
            PriceRangeFacet(
                min=low,
                max=high,
                count=len(prices),
                label=_price_label(low, high),
            )
        ]

    facets = []
    buckets = price_buckets(low, high)
    for index, (lower, upper) in enumerate(buckets):
        last = index == len(buckets) - 1
        # Half-open buckets so shared edges are counted once
        count = sum(1 for price in prices if lower <= price and (price < upper or (last and price <= upper)))
        if count:
            facets.append(
                PriceRangeFacet(min=lower, max=upper, count=count, label=_price_label(lower, upper))
            )
    return facets


def _price_label(lower: float, upper: float) -> str:
    if round(lower) == round(upper):
        return f"${round(lower)}"
    return f"${round(lower)} - ${round(upper)}"


def filter_facets_by_min_count(facets: FacetSet, min_count: int = 2) -> FacetSet:
    """Drop facet values seen fewer than ``min_count`` times."""
    return facets.model_copy(
        update={
            "vendors": [f for f in facets.vendors if f.count >= min_count],
            "product_types": [f for f in facets.product_types if f.count >= min_count],
            "tags": [f for f in facets.tags if f.count >= min_count],
            "price_ranges": [f for f in facets.price_ranges if f.count >= min_count],
        }
    )


def top_facets(
    facets: FacetSet,
    vendors: int = 10,
    types: int = 10,
    tags: int = 15,
) -> FacetSet:
    """Truncate each facet list."""
    return facets.model_copy(
        update={
            "vendors": facets.vendors[:vendors],
            "product_types": facets.product_types[:types],
            "tags": facets.tags[:tags],
        }
    )
