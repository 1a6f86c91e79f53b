"""
Sorting - Result ordering and pagination.

All sorts are stable, so equal keys keep the ranking order.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from .models import Candidate, SortBy

__all__ = ["sort_candidates", "paginate"]

T = TypeVar("T")


def sort_candidates(candidates: list[Candidate], sort_by: SortBy) -> list[Candidate]:
    """
    Re-sort ranked candidates.

    ``relevance`` keeps the ranking order. Missing prices sort as 0;
    products without ``created_at`` sort after dated ones for ``newest``.
    """
    if sort_by == SortBy.PRICE_ASC:
        return sorted(candidates, key=lambda c: c.price_min or 0.0)
    if sort_by == SortBy.PRICE_DESC:
        return sorted(candidates, key=lambda c: c.price_max or 0.0, reverse=True)
    if sort_by == SortBy.TITLE:
        return sorted(candidates, key=lambda c: c.title.lower())
    if sort_by == SortBy.NEWEST:
        dated = [c for c in candidates if c.created_at is not None]
        undated = [c for c in candidates if c.created_at is None]
        dated.sort(key=lambda c: c.created_at.timestamp(), reverse=True)
        return dated + undated
    return list(candidates)


def paginate(items: Sequence[T], offset: int, limit: int) -> list[T]:
    """Window ``items[offset:offset + limit]``."""
    return list(items[offset : offset + limit])
