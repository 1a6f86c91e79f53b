"""
Row Mapping - Store rows to typed candidates.

Store adapters return loosely shaped mappings. Everything downstream of
retrieval only sees validated ``Candidate`` objects built here.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from pydantic import ValidationError

from xpertsearch.domains.search.models import Candidate, ProductVariant
from xpertsearch.domains.search.pricing import calculate_price_range, is_on_sale

logger = logging.getLogger(__name__)

__all__ = ["candidate_from_row", "candidates_from_rows", "clamp_score"]


def clamp_score(value: float | None) -> float:
    if value is None:
        return 0.0
    return max(0.0, min(1.0, float(value)))


def _parse_tags(raw: Any) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        if raw.startswith("["):
            try:
                return [str(t) for t in json.loads(raw)]
            except json.JSONDecodeError:
                pass
        return [t.strip() for t in raw.split(",") if t.strip()]
    return [str(t) for t in raw]


def _parse_variants(raw: Any) -> list[ProductVariant]:
    if not raw:
        return []
    if isinstance(raw, str):
        raw = json.loads(raw)
    return [ProductVariant.model_validate({**v, "id": str(v["id"])}) for v in raw]


def candidate_from_row(row: Mapping[str, Any], similarity: float | None = None) -> Candidate:
    """
    Build a Candidate from a store row.

    Args:
        row: Product row (``variants`` may be a list or JSON text)
        similarity: Score to assign, clamped to [0, 1]

    Raises:
        ValidationError: If the row lacks an id or has malformed fields
    """
    variants = _parse_variants(row.get("variants"))
    price_range = calculate_price_range(variants, currency=row.get("currency"))

    price_min = row.get("price_min")
    price_max = row.get("price_max")
    if price_min is None and price_range is not None:
        price_min = price_range.min
    if price_max is None and price_range is not None:
        price_max = price_range.max

    available = row.get("available")
    if available is None:
        available = any(v.available for v in variants) if variants else True

    return Candidate(
        id=str(row["id"]),
        shopify_product_id=row.get("shopify_product_id"),
        title=row.get("title") or "",
        description=row.get("description"),
        vendor=row.get("vendor"),
        product_type=row.get("product_type"),
        tags=_parse_tags(row.get("tags")),
        image_url=row.get("image_url"),
        handle=row.get("handle"),
        price_min=price_min,
        price_max=price_max,
        available=bool(available),
        variants=variants,
        price_range=price_range,
        on_sale=is_on_sale(variants),
        created_at=row.get("created_at"),
        similarity_score=clamp_score(similarity),
    )


def candidates_from_rows(
    rows: list[Mapping[str, Any]],
    similarity: float | None = None,
    similarity_key: str | None = None,
) -> list[Candidate]:
    """
    Map rows, skipping (and logging) any that fail validation.

    When ``similarity_key`` is given, a row value under that key takes
    precedence over ``similarity``.
    """
    candidates = []
    for row in rows:
        score = similarity
        if similarity_key and row.get(similarity_key) is not None:
            score = row[similarity_key]
        try:
            candidates.append(candidate_from_row(row, score))
        except (KeyError, ValidationError, json.JSONDecodeError) as e:
            logger.warning("Skipping malformed product row %s: %s", row.get("id"), e)
    return candidates
