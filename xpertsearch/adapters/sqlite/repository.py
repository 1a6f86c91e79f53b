"""
SQLite Product Store - Product catalogue storage and retrieval.

Features:
- Async operations via aiosqlite
- Products and variants tables, scoped per shop
- Keyword search as an OR predicate over text fields and variant SKU/title
- Vector search through a FAISS index keyed by ``products.vector_id``
- Filter translation shared by both search paths
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiosqlite

from xpertsearch.config import StorageError
from xpertsearch.domains.search.models import FilterSet, ProductVariant
from xpertsearch.domains.search.pricing import calculate_price_range

if TYPE_CHECKING:
    import numpy as np

    from xpertsearch.adapters.faiss import FAISSIndex

logger = logging.getLogger(__name__)

__all__ = ["SQLiteProductStore"]

_PRODUCT_COLUMNS = (
    "id, shopify_product_id, title, description, vendor, product_type, handle, "
    "tags, image_url, currency, price_min, price_max, available, created_at, vector_id"
)
_SELECT_COLUMNS = ", ".join(f"p.{column.strip()}" for column in _PRODUCT_COLUMNS.split(","))


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _filter_clauses(filters: FilterSet) -> tuple[list[str], list[Any]]:
    """Translate a FilterSet into SQL predicates on ``products p``."""
    clauses: list[str] = []
    params: list[Any] = []

    # Price filters match any product whose range overlaps the requested one
    if filters.price_max:
        clauses.append("p.price_min <= ?")
        params.append(filters.price_max)
    if filters.price_min:
        clauses.append("p.price_max >= ?")
        params.append(filters.price_min)
    if filters.vendor:
        clauses.append("p.vendor LIKE ? ESCAPE '\\'")
        params.append(_like(filters.vendor))
    if filters.product_type:
        clauses.append("p.product_type LIKE ? ESCAPE '\\'")
        params.append(_like(filters.product_type))
    if filters.tags:
        placeholders = ", ".join("?" for _ in filters.tags)
        clauses.append(
            "EXISTS (SELECT 1 FROM json_each(p.tags) t "
            f"WHERE lower(t.value) IN ({placeholders}))"
        )
        params.extend(tag.lower() for tag in filters.tags)
    if filters.available is not None:
        clauses.append("p.available = ?")
        params.append(1 if filters.available else 0)

    return clauses, params


class SQLiteProductStore:
    """
    SQLite-backed product store.

    Example:
        >>> store = SQLiteProductStore("data/xpertsearch.db", index=FAISSIndex(384))
        >>> await store.initialize()
        >>> await store.upsert_product("shop-1", {"id": "p1", "title": "Red Dress"}, vector)
        >>> rows = await store.keyword_search(["dress"], "shop-1", FilterSet(), 20)
    """

    def __init__(
        self,
        db_path: str | Path,
        index: FAISSIndex | None = None,
        index_path: str | Path | None = None,
        vector_scan_factor: int = 4,
    ) -> None:
        """
        Initialize store.

        Args:
            db_path: Path to SQLite database file (":memory:" for tests)
            index: FAISS index holding product embeddings
            index_path: Directory the index is loaded from and saved to
            vector_scan_factor: Nearest neighbours scanned per requested match
        """
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.index = index
        self.index_path = Path(index_path) if index_path else None
        self.vector_scan_factor = max(1, vector_scan_factor)
        self._connection: aiosqlite.Connection | None = None

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        if self._connection is None:
            try:
                self._connection = await aiosqlite.connect(self.db_path)
            except Exception as e:
                raise StorageError(f"Cannot open product database: {e}") from e
            self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema and load a persisted index."""
        conn = await self._get_connection()

        await conn.executescript("""
            CREATE TABLE IF NOT EXISTS products (
                shop_id TEXT NOT NULL,
                id TEXT NOT NULL,
                shopify_product_id INTEGER,
                title TEXT NOT NULL DEFAULT '',
                description TEXT,
                vendor TEXT,
                product_type TEXT,
                handle TEXT,
                tags TEXT NOT NULL DEFAULT '[]',
                image_url TEXT,
                currency TEXT,
                price_min REAL,
                price_max REAL,
                available INTEGER NOT NULL DEFAULT 1,
                created_at TEXT,
                vector_id INTEGER,
                PRIMARY KEY (shop_id, id)
            );

            CREATE TABLE IF NOT EXISTS variants (
                shop_id TEXT NOT NULL,
                product_id TEXT NOT NULL,
                id TEXT NOT NULL,
                title TEXT,
                sku TEXT,
                price REAL,
                compare_at_price REAL,
                available INTEGER NOT NULL DEFAULT 1,
                inventory_quantity INTEGER NOT NULL DEFAULT 0,
                image_url TEXT,
                PRIMARY KEY (shop_id, product_id, id)
            );

            CREATE INDEX IF NOT EXISTS idx_products_vector ON products(shop_id, vector_id);
            CREATE INDEX IF NOT EXISTS idx_products_vendor ON products(shop_id, vendor);
            CREATE INDEX IF NOT EXISTS idx_variants_product ON variants(shop_id, product_id);
        """)

        await conn.commit()

        if self.index is not None and self.index_path and self.index.exists(self.index_path):
            await self.index.load(self.index_path)

        logger.info("Product store initialized: %s", self.db_path)

    async def upsert_product(
        self,
        shop_id: str,
        product: dict[str, Any],
        embedding: np.ndarray | None = None,
    ) -> None:
        """
        Insert or replace a product and its variants.

        When an embedding is given it is added to the FAISS index and the
        product points at the new vector. Older vectors for the product are
        left in the index but no longer resolve to a row. Without an
        embedding the current vector is kept.
        """
        conn = await self._get_connection()

        variants = [
            ProductVariant.model_validate({**v, "id": str(v["id"])})
            for v in product.get("variants") or []
        ]
        price_range = calculate_price_range(variants)
        available = product.get("available")
        if available is None:
            available = any(v.available for v in variants) if variants else True
        created_at = product.get("created_at") or datetime.now(timezone.utc)
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()

        if embedding is not None and self.index is not None:
            ids = await self.index.add_vectors(
                embedding.reshape(1, -1),
                [{"shop_id": shop_id, "product_id": str(product["id"])}],
            )
            vector_id = ids[0]
        else:
            cursor = await conn.execute(
                "SELECT vector_id FROM products WHERE shop_id = ? AND id = ?",
                (shop_id, str(product["id"])),
            )
            existing = await cursor.fetchone()
            vector_id = existing[0] if existing else None

        try:
            await conn.execute(
                f"""
                INSERT OR REPLACE INTO products (shop_id, {_PRODUCT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    shop_id,
                    str(product["id"]),
                    product.get("shopify_product_id"),
                    product.get("title") or "",
                    product.get("description"),
                    product.get("vendor"),
                    product.get("product_type"),
                    product.get("handle"),
                    json.dumps(product.get("tags") or []),
                    product.get("image_url"),
                    product.get("currency"),
                    price_range.min if price_range else product.get("price_min"),
                    price_range.max if price_range else product.get("price_max"),
                    1 if available else 0,
                    created_at,
                    vector_id,
                ),
            )
            await conn.execute(
                "DELETE FROM variants WHERE shop_id = ? AND product_id = ?",
                (shop_id, str(product["id"])),
            )
            await conn.executemany(
                """
                INSERT INTO variants
                (shop_id, product_id, id, title, sku, price, compare_at_price,
                 available, inventory_quantity, image_url)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        shop_id,
                        str(product["id"]),
                        v.id,
                        v.title,
                        v.sku,
                        v.price,
                        v.compare_at_price,
                        1 if v.available else 0,
                        v.inventory_quantity,
                        v.image_url,
                    )
                    for v in variants
                ],
            )
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            raise StorageError(f"Product upsert failed: {e}", {"product_id": product["id"]}) from e

    async def _attach_variants(
        self,
        conn: aiosqlite.Connection,
        shop_id: str,
        rows: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        if not rows:
            return rows

        ids = [row["id"] for row in rows]
        placeholders = ", ".join("?" for _ in ids)
        cursor = await conn.execute(
            f"""
            SELECT product_id, id, title, sku, price, compare_at_price,
                   available, inventory_quantity, image_url
            FROM variants
            WHERE shop_id = ? AND product_id IN ({placeholders})
            ORDER BY rowid
            """,
            (shop_id, *ids),
        )
        by_product: dict[str, list[dict[str, Any]]] = {}
        for variant in await cursor.fetchall():
            data = dict(variant)
            by_product.setdefault(data.pop("product_id"), []).append(data)

        for row in rows:
            row["variants"] = by_product.get(row["id"], [])
        return rows

    async def keyword_search(
        self,
        terms: list[str],
        shop_id: str,
        filters: FilterSet,
        limit: int,
    ) -> list[dict[str, Any]]:
        """
        Products matching any term in any searchable field.

        Searchable fields: title, description, vendor, product_type, handle,
        tags and variant SKU/title. Matching is case-insensitive substring.
        """
        if not terms:
            return []

        conn = await self._get_connection()

        term_clauses = []
        params: list[Any] = [shop_id]
        for term in terms:
            pattern = _like(term)
            term_clauses.append(
                "(p.title LIKE ? ESCAPE '\\' OR p.description LIKE ? ESCAPE '\\' "
                "OR p.vendor LIKE ? ESCAPE '\\' OR p.product_type LIKE ? ESCAPE '\\' "
                "OR p.handle LIKE ? ESCAPE '\\' OR p.tags LIKE ? ESCAPE '\\' "
                "OR EXISTS (SELECT 1 FROM variants v WHERE v.shop_id = p.shop_id "
                "AND v.product_id = p.id "
                "AND (v.sku LIKE ? ESCAPE '\\' OR v.title LIKE ? ESCAPE '\\')))"
            )
            params.extend([pattern] * 8)

        filter_clauses, filter_params = _filter_clauses(filters)
        where = ["p.shop_id = ?", f"({' OR '.join(term_clauses)})", *filter_clauses]
        params.extend(filter_params)
        params.append(limit)

        try:
            cursor = await conn.execute(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM products p
                WHERE {" AND ".join(where)}
                ORDER BY p.rowid
                LIMIT ?
                """,
                params,
            )
            rows = [dict(row) for row in await cursor.fetchall()]
            return await self._attach_variants(conn, shop_id, rows)
        except aiosqlite.Error as e:
            raise StorageError(f"Keyword search failed: {e}", {"shop_id": shop_id}) from e

    async def vector_search(
        self,
        embedding: np.ndarray,
        shop_id: str,
        filters: FilterSet,
        match_threshold: float,
        match_count: int,
    ) -> list[dict[str, Any]]:
        """
        Nearest products by cosine similarity, best first.

        FAISS hits below ``match_threshold`` are dropped; the remaining
        positions are resolved to rows with the filter predicates applied.
        Each row carries its ``similarity``.
        """
        if self.index is None or self.index.size == 0 or match_count <= 0:
            return []

        hits = await self.index.search(
            embedding,
            k=match_count * self.vector_scan_factor,
            predicate=lambda meta: meta.get("shop_id") == shop_id,
        )
        similarity = {h["index"]: h["score"] for h in hits if h["score"] >= match_threshold}
        if not similarity:
            return []

        conn = await self._get_connection()

        placeholders = ", ".join("?" for _ in similarity)
        filter_clauses, filter_params = _filter_clauses(filters)
        where = ["p.shop_id = ?", f"p.vector_id IN ({placeholders})", *filter_clauses]

        try:
            cursor = await conn.execute(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM products p
                WHERE {" AND ".join(where)}
                """,
                (shop_id, *similarity.keys(), *filter_params),
            )
            rows = [dict(row) for row in await cursor.fetchall()]
        except aiosqlite.Error as e:
            raise StorageError(f"Vector search failed: {e}", {"shop_id": shop_id}) from e

        for row in rows:
            row["similarity"] = similarity[row["vector_id"]]
        rows.sort(key=lambda r: r["similarity"], reverse=True)
        rows = rows[:match_count]

        return await self._attach_variants(conn, shop_id, rows)

    async def get_product_count(self, shop_id: str | None = None) -> int:
        """Get product count, optionally for one shop."""
        conn = await self._get_connection()
        if shop_id:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM products WHERE shop_id = ?", (shop_id,)
            )
        else:
            cursor = await conn.execute("SELECT COUNT(*) FROM products")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def close(self) -> None:
        """Persist the index and close the database connection."""
        if self.index is not None and self.index_path and self.index.size:
            await self.index.save(self.index_path)
        if self._connection:
            await self._connection.close()
            self._connection = None
