"""
Pricing - Variant price range and sale detection.
"""

from __future__ import annotations

from typing import Iterable

from .models import PriceRange, ProductVariant

__all__ = ["calculate_price_range", "is_on_sale"]


def calculate_price_range(
    variants: Iterable[ProductVariant],
    currency: str | None = None,
) -> PriceRange | None:
    """
    Compute the price range spanned by a product's variants.

    Sale bounds are only set when at least one variant has a
    ``compare_at_price`` above its price.
    """
    variants = list(variants)
    prices = [v.price for v in variants if v.price is not None and v.price >= 0]
    if not prices:
        return None

    sale_prices = [
        v.price
        for v in variants
        if v.price is not None and v.compare_at_price and v.compare_at_price > v.price
    ]

    return PriceRange(
        min=min(prices),
        max=max(prices),
        sale_min=min(sale_prices) if sale_prices else None,
        sale_max=max(sale_prices) if sale_prices else None,
        currency=currency,
    )


def is_on_sale(variants: Iterable[ProductVariant]) -> bool:
    """True if any variant is discounted against its compare-at price."""
    return any(
        v.price is not None and v.compare_at_price is not None and v.compare_at_price > v.price
        for v in variants
    )
