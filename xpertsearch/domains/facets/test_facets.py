"""
Tests for facet generation.
"""

from __future__ import annotations

from xpertsearch.domains.search.models import Candidate

from .generator import (
    filter_facets_by_min_count,
    generate_facets,
    price_buckets,
    top_facets,
)


def _product(
    pid: str,
    price: float | None = None,
    vendor: str | None = None,
    product_type: str | None = None,
    tags: list[str] | None = None,
    available: bool = True,
    on_sale: bool = False,
) -> Candidate:
    return Candidate(
        id=pid,
        shopify_product_id=int(pid),
        title=f"Product {pid}",
        price_min=price,
        price_max=price,
        vendor=vendor,
        product_type=product_type,
        tags=tags or [],
        available=available,
        on_sale=on_sale,
    )


# --- Grouping Tests ---


def test_empty_candidates_give_empty_facets() -> None:
    """Test no candidates produce zeroed facets."""
    facets = generate_facets([])
    assert facets.vendors == []
    assert facets.price_ranges == []
    assert facets.availability.in_stock == 0


def test_vendor_and_type_counts_sorted_descending() -> None:
    """Test vendor/type facets are grouped and sorted by count."""
    products = [
        _product("1", vendor="Acme", product_type="Shoes"),
        _product("2", vendor="Zeta", product_type="Shoes"),
        _product("3", vendor="Zeta", product_type="Boots"),
        _product("4", vendor="Zeta"),
    ]
    facets = generate_facets(products)

    assert [(f.value, f.count) for f in facets.vendors] == [("Zeta", 3), ("Acme", 1)]
    assert facets.product_types[0].value == "Shoes"
    assert facets.product_types[0].count == 2


def test_facet_truncation_limits() -> None:
    """Test vendors/types cap at 15 and tags at 20."""
    products = [
        _product(str(i), vendor=f"V{i}", product_type=f"T{i}", tags=[f"tag{i}", f"extra{i}"])
        for i in range(1, 31)
    ]
    facets = generate_facets(products)

    assert len(facets.vendors) == 15
    assert len(facets.product_types) == 15
    assert len(facets.tags) == 20


def test_availability_and_sale_counts() -> None:
    """Test availability and on-sale facets."""
    products = [
        _product("1", available=True, on_sale=True),
        _product("2", available=False),
        _product("3", available=True),
    ]
    facets = generate_facets(products)

    assert facets.availability.in_stock == 2
    assert facets.availability.out_of_stock == 1
    assert facets.on_sale.on_sale == 1
    assert facets.on_sale.regular_price == 2


# --- Price Bucket Tests ---


def test_small_price_range_uses_twenty_wide_buckets() -> None:
    """Test a range of 40 yields at most three 20-unit buckets."""
    buckets = price_buckets(10, 50)
    assert len(buckets) <= 3
    for lower, upper in buckets:
        assert upper - lower <= 20


def test_medium_price_range_uses_twenty_five_wide_buckets() -> None:
    """Test 50 < range <= 200 uses 25-unit buckets."""
    buckets = price_buckets(0, 100)
    assert buckets == [(0, 25), (25, 50), (50, 75), (75, 100)]


def test_wide_price_range_uses_four_percentage_buckets() -> None:
    """Test a range of 500 yields exactly four non-overlapping buckets."""
    buckets = price_buckets(0, 500)
    assert buckets == [(0, 100), (100, 250), (250, 400), (400, 500)]
    for (_, upper), (lower, _) in zip(buckets, buckets[1:]):
        assert upper <= lower


def test_empty_buckets_are_dropped() -> None:
    """Test buckets with no candidates are not emitted."""
    products = [_product("1", price=10), _product("2", price=510)]
    facets = generate_facets(products)

    assert len(facets.price_ranges) == 2
    assert sum(r.count for r in facets.price_ranges) == 2


def test_single_price_gives_single_bucket() -> None:
    """Test identical prices collapse into one bucket."""
    products = [_product("1", price=20), _product("2", price=20)]
    facets = generate_facets(products)

    assert len(facets.price_ranges) == 1
    assert facets.price_ranges[0].count == 2
    assert facets.price_ranges[0].label == "$20"


def test_zero_and_missing_prices_ignored() -> None:
    """Test unpriced candidates do not influence price facets."""
    products = [_product("1", price=None), _product("2", price=0)]
    assert generate_facets(products).price_ranges == []


# --- Helper Tests ---


def test_filter_and_top_facets() -> None:
    """Test min-count filtering and truncation helpers."""
    products = [
        _product("1", vendor="Acme"),
        _product("2", vendor="Acme"),
        _product("3", vendor="Solo"),
    ]
    facets = generate_facets(products)

    filtered = filter_facets_by_min_count(facets, min_count=2)
    assert [f.value for f in filtered.vendors] == ["Acme"]

    topped = top_facets(facets, vendors=1)
    assert len(topped.vendors) == 1
