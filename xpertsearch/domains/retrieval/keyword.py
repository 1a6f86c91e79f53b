"""
Keyword Retriever - Term matching with a deterministic field-weighted score.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from xpertsearch.domains.search.models import Candidate, FilterSet

from .mapping import candidates_from_rows, clamp_score
from .models import RetrievalResult

if TYPE_CHECKING:
    from .contracts import ProductStore

logger = logging.getLogger(__name__)

__all__ = ["KeywordRetriever", "score_keyword_match", "split_terms"]

BASE_SCORE = 0.3
TITLE_WEIGHT = 0.25
VENDOR_WEIGHT = 0.15
TYPE_WEIGHT = 0.10
DESCRIPTION_WEIGHT = 0.05
HANDLE_WEIGHT = 0.10
TAG_WEIGHT = 0.15
VARIANT_WEIGHT = 0.20
EXACT_TITLE_BONUS = 0.3
EXACT_SKU_BONUS = 0.5


def split_terms(query: str) -> list[str]:
    """Lowercase whitespace-separated terms."""
    return query.lower().split()


def score_keyword_match(candidate: Candidate, query: str, terms: list[str] | None = None) -> float:
    """
    Score how well ``candidate`` matches ``query``.

    Each term is checked against every field independently and the field
    weights are summed across terms. Exact title and exact variant SKU
    matches on the full query earn a bonus. The result is clamped to [0, 1].
    """
    if terms is None:
        terms = split_terms(query)

    title = candidate.title.lower()
    vendor = (candidate.vendor or "").lower()
    product_type = (candidate.product_type or "").lower()
    description = (candidate.description or "").lower()
    handle = (candidate.handle or "").lower()
    tags = [t.lower() for t in candidate.tags]
    variant_fields = [
        field.lower()
        for variant in candidate.variants
        for field in (variant.sku, variant.title)
        if field
    ]

    score = BASE_SCORE
    for term in terms:
        if term in title:
            score += TITLE_WEIGHT
        if term in vendor:
            score += VENDOR_WEIGHT
        if term in product_type:
            score += TYPE_WEIGHT
        if term in description:
            score += DESCRIPTION_WEIGHT
        if term in handle:
            score += HANDLE_WEIGHT
        if any(term in tag for tag in tags):
            score += TAG_WEIGHT
        if any(term in field for field in variant_fields):
            score += VARIANT_WEIGHT

    normalized = query.strip().lower()
    if title == normalized:
        score += EXACT_TITLE_BONUS
    if any((v.sku or "").lower() == normalized for v in candidate.variants):
        score += EXACT_SKU_BONUS

    return clamp_score(score)


class KeywordRetriever:
    """Retrieves candidates whose searchable fields contain any query term."""

    source = "keyword"

    def __init__(self, store: ProductStore, over_fetch_factor: int = 2) -> None:
        self._store = store
        self._factor = max(2, min(3, over_fetch_factor))

    async def retrieve(
        self,
        query: str,
        shop_id: str,
        filters: FilterSet,
        limit: int,
    ) -> RetrievalResult:
        terms = split_terms(query)
        if not terms:
            return RetrievalResult(source=self.source)

        try:
            rows = await self._store.keyword_search(terms, shop_id, filters, limit * self._factor)
        except Exception as e:
            logger.warning("Keyword search failed for shop %s: %s", shop_id, e)
            return RetrievalResult.failure(self.source, e)

        candidates = [
            c.model_copy(update={"similarity_score": score_keyword_match(c, query, terms)})
            for c in candidates_from_rows(rows)
        ]
        candidates.sort(key=lambda c: c.similarity_score, reverse=True)

        logger.info(
            "Keyword retrieval: query='%s' terms=%d shop=%s -> %d candidates",
            query[:50],
            len(terms),
            shop_id,
            len(candidates),
        )
        return RetrievalResult(source=self.source, candidates=candidates)
