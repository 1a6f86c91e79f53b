"""
Vector Retriever - Embedding similarity retrieval.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from xpertsearch.domains.search.models import FilterSet

from .mapping import candidates_from_rows, clamp_score
from .models import RetrievalResult

if TYPE_CHECKING:
    from .contracts import EmbeddingProvider, ProductStore

logger = logging.getLogger(__name__)

__all__ = ["VectorRetriever"]


class VectorRetriever:
    """
    Retrieves candidates by query-embedding similarity.

    Over-fetches ``limit * over_fetch_factor`` rows so fusion and ranking
    have enough material. Failures (embedding or store) yield an empty,
    failed ``RetrievalResult``.
    """

    source = "vector"

    def __init__(
        self,
        store: ProductStore,
        embedder: EmbeddingProvider,
        match_threshold: float = 0.5,
        over_fetch_factor: int = 2,
        placeholder_similarity: float = 0.5,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._threshold = match_threshold
        self._factor = max(2, min(3, over_fetch_factor))
        self._placeholder = clamp_score(placeholder_similarity)

    async def retrieve(
        self,
        query: str,
        shop_id: str,
        filters: FilterSet,
        limit: int,
        match_threshold: float | None = None,
    ) -> RetrievalResult:
        try:
            embedding = await self._embedder.embed(query)
        except Exception as e:
            logger.warning("Query embedding failed for shop %s: %s", shop_id, e)
            return RetrievalResult.failure(self.source, e)

        try:
            rows = await self._store.vector_search(
                embedding,
                shop_id,
                filters,
                self._threshold if match_threshold is None else match_threshold,
                limit * self._factor,
            )
        except Exception as e:
            logger.warning("Vector search failed for shop %s: %s", shop_id, e)
            return RetrievalResult.failure(self.source, e)

        # Rows without a store-reported similarity get the placeholder score
        candidates = candidates_from_rows(rows, self._placeholder, similarity_key="similarity")

        candidates.sort(key=lambda c: c.similarity_score, reverse=True)

        logger.info(
            "Vector retrieval: query='%s' shop=%s -> %d candidates",
            query[:50],
            shop_id,
            len(candidates),
        )
        return RetrievalResult(source=self.source, candidates=candidates)
