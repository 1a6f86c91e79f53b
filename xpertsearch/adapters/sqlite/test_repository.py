"""Tests for the SQLite product store."""

from pathlib import Path

import numpy as np
import pytest

from xpertsearch.adapters.faiss import FAISSIndex
from xpertsearch.domains.retrieval.mapping import candidates_from_rows
from xpertsearch.domains.search.models import FilterSet

from .repository import SQLiteProductStore


def _vec(*values: float) -> np.ndarray:
    return np.array(values, dtype="float32")


PRODUCTS = [
    (
        {
            "id": "p1",
            "shopify_product_id": 1,
            "title": "Red Evening Dress",
            "vendor": "Acme Apparel",
            "product_type": "Dress",
            "tags": ["evening", "formal"],
            "variants": [
                {"id": 11, "sku": "RED-S", "price": 80.0, "compare_at_price": 100.0},
                {"id": 12, "sku": "RED-M", "price": 90.0},
            ],
        },
        _vec(1, 0, 0),
    ),
    (
        {
            "id": "p2",
            "shopify_product_id": 2,
            "title": "Blue Denim Jacket",
            "vendor": "Northwind",
            "product_type": "Jacket",
            "tags": ["casual"],
            "variants": [{"id": 21, "sku": "DNM-01", "title": "Indigo", "price": 120.0}],
        },
        _vec(0, 1, 0),
    ),
    (
        {
            "id": "p3",
            "shopify_product_id": 3,
            "title": "Crimson Gown",
            "vendor": "Acme Apparel",
            "product_type": "Dress",
            "tags": ["formal"],
            "variants": [{"id": 31, "price": 300.0, "available": False}],
        },
        _vec(0.9, 0.1, 0),
    ),
]


@pytest.fixture
async def store(tmp_path: Path):
    """Create a store over a temporary database with a small catalogue."""
    store = SQLiteProductStore(
        tmp_path / "test.db",
        index=FAISSIndex(dimension=3),
        index_path=tmp_path / "index",
    )
    await store.initialize()
    for product, embedding in PRODUCTS:
        await store.upsert_product("shop-1", product, embedding)
    await store.upsert_product("shop-2", {"id": "x1", "title": "Red Scarf"}, _vec(1, 0, 0))
    yield store
    await store.close()


async def test_initialize_creates_tables(store: SQLiteProductStore):
    """Test that initialize creates all required tables."""
    conn = await store._get_connection()
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in await cursor.fetchall()}

    assert {"products", "variants"} <= tables


async def test_upsert_derives_price_and_availability(store: SQLiteProductStore):
    """Test product rows store the variant price range and availability."""
    rows = await store.keyword_search(["crimson"], "shop-1", FilterSet(), 10)

    assert len(rows) == 1
    assert (rows[0]["price_min"], rows[0]["price_max"]) == (300.0, 300.0)
    assert rows[0]["available"] == 0


async def test_keyword_search_or_across_fields(store: SQLiteProductStore):
    """Test any term in any field matches, scoped to the shop."""
    rows = await store.keyword_search(["red", "northwind"], "shop-1", FilterSet(), 10)

    assert {row["id"] for row in rows} == {"p1", "p2"}


async def test_keyword_search_matches_variant_sku_and_title(store: SQLiteProductStore):
    """Test variant SKU and title are searchable."""
    by_sku = await store.keyword_search(["dnm-01"], "shop-1", FilterSet(), 10)
    by_title = await store.keyword_search(["indigo"], "shop-1", FilterSet(), 10)

    assert [row["id"] for row in by_sku] == ["p2"]
    assert [row["id"] for row in by_title] == ["p2"]


async def test_keyword_search_treats_wildcards_literally(store: SQLiteProductStore):
    """Test LIKE wildcards in terms do not match everything."""
    assert await store.keyword_search(["%"], "shop-1", FilterSet(), 10) == []


@pytest.mark.parametrize(
    "filters, expected",
    [
        (FilterSet(vendor="acme"), {"p1", "p3"}),
        (FilterSet(product_type="jacket"), {"p2"}),
        (FilterSet(price_max=100), {"p1"}),
        (FilterSet(price_min=100, price_max=200), {"p2"}),
        (FilterSet(tags=["FORMAL"]), {"p1", "p3"}),
        (FilterSet(available=True), {"p1", "p2"}),
    ],
)
async def test_keyword_search_filters(
    store: SQLiteProductStore, filters: FilterSet, expected: set[str]
):
    """Test filter translation for each filter field."""
    rows = await store.keyword_search(["dress", "jacket", "gown"], "shop-1", filters, 10)

    assert {row["id"] for row in rows} == expected


async def test_rows_map_to_candidates(store: SQLiteProductStore):
    """Test store rows validate into candidates with variants."""
    rows = await store.keyword_search(["evening"], "shop-1", FilterSet(), 10)

    [candidate] = candidates_from_rows(rows, similarity=0.4)

    assert candidate.id == "p1"
    assert candidate.tags == ["evening", "formal"]
    assert [v.id for v in candidate.variants] == ["11", "12"]
    assert candidate.on_sale is True
    assert candidate.price_range is not None
    assert candidate.price_range.sale_min == 80.0


async def test_vector_search_orders_by_similarity(store: SQLiteProductStore):
    """Test vector search is shop scoped and best first."""
    rows = await store.vector_search(_vec(1, 0, 0), "shop-1", FilterSet(), 0.5, 10)

    assert [row["id"] for row in rows] == ["p1", "p3"]
    assert rows[0]["similarity"] == pytest.approx(1.0, abs=1e-5)
    assert rows[0]["variants"]


async def test_vector_search_applies_filters(store: SQLiteProductStore):
    """Test filters post-check the nearest neighbours."""
    rows = await store.vector_search(
        _vec(1, 0, 0), "shop-1", FilterSet(available=True), 0.5, 10
    )

    assert [row["id"] for row in rows] == ["p1"]


async def test_vector_search_respects_match_count(store: SQLiteProductStore):
    """Test only match_count rows are returned."""
    rows = await store.vector_search(_vec(1, 0, 0), "shop-1", FilterSet(), 0.0, 1)

    assert [row["id"] for row in rows] == ["p1"]


async def test_reembedded_product_drops_stale_vector(store: SQLiteProductStore):
    """Test an updated embedding replaces the product's old position."""
    product, _ = PRODUCTS[1]
    await store.upsert_product("shop-1", product, _vec(1, 0, 0))

    rows = await store.vector_search(_vec(0, 1, 0), "shop-1", FilterSet(), 0.9, 10)

    assert rows == []


async def test_vector_search_without_index(tmp_path: Path):
    """Test a store without an index returns no vector rows."""
    store = SQLiteProductStore(tmp_path / "plain.db")
    await store.initialize()

    assert await store.vector_search(_vec(1, 0, 0), "shop-1", FilterSet(), 0.5, 10) == []
    await store.close()


async def test_product_count(store: SQLiteProductStore):
    """Test counting products per shop."""
    assert await store.get_product_count("shop-1") == 3
    assert await store.get_product_count() == 4


async def test_close_persists_index(store: SQLiteProductStore, tmp_path: Path):
    """Test closing the store saves the FAISS index."""
    await store.close()

    assert FAISSIndex.exists(tmp_path / "index")
