"""
Hybrid Search Engine - Concurrent vector and keyword retrieval fused with RRF.

Features:
- Vector and keyword retrievers run concurrently and are joined before fusion
- A failed source degrades to empty; only both failing is an error
- Weighted Reciprocal Rank Fusion (RRF)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from xpertsearch.config.errors import StrategyError

from .fusion import DEFAULT_RRF_K, FusionWeights, reciprocal_rank_fusion
from .models import FilterSet, FusedResult

if TYPE_CHECKING:
    from xpertsearch.domains.retrieval import KeywordRetriever, VectorRetriever

logger = logging.getLogger(__name__)

__all__ = ["HybridSearchEngine"]


class HybridSearchEngine:
    """
    Hybrid retrieval combining vector and keyword approaches.

    Example:
        >>> engine = HybridSearchEngine(vector_retriever, keyword_retriever)
        >>> fused = await engine.search("red dress", "shop.myshopify.com", FilterSet(), 20)
    """

    def __init__(
        self,
        vector_retriever: VectorRetriever,
        keyword_retriever: KeywordRetriever,
        weights: FusionWeights | None = None,
        rrf_k: int = DEFAULT_RRF_K,
    ) -> None:
        """
        Initialize hybrid search engine.

        Args:
            vector_retriever: Embedding similarity retriever
            keyword_retriever: Term matching retriever
            weights: RRF source weights
            rrf_k: RRF constant (default 60)
        """
        self._vector = vector_retriever
        self._keyword = keyword_retriever
        self._weights = weights or FusionWeights()
        self._rrf_k = rrf_k

    async def search(
        self,
        query: str,
        shop_id: str,
        filters: FilterSet,
        limit: int,
        match_threshold: float | None = None,
    ) -> FusedResult:
        """
        Execute hybrid retrieval and fuse the two candidate lists.

        Args:
            query: Search text
            shop_id: Tenant identifier
            filters: Store-side filters
            limit: Requested result window (retrievers over-fetch beyond it)
            match_threshold: Vector similarity floor override

        Returns:
            Fused candidates

        Raises:
            StrategyError: If both retrieval sources failed
        """
        vector_result, keyword_result = await asyncio.gather(
            self._vector.retrieve(query, shop_id, filters, limit, match_threshold=match_threshold),
            self._keyword.retrieve(query, shop_id, filters, limit),
        )

        if vector_result.failed and keyword_result.failed:
            raise StrategyError(
                "Both retrieval sources failed",
                details={
                    "vector": vector_result.error,
                    "keyword": keyword_result.error,
                },
            )

        fused = reciprocal_rank_fusion(
            vector_result.candidates,
            keyword_result.candidates,
            self._weights,
            self._rrf_k,
        )

        logger.info(
            "Hybrid search: query='%s' -> %d results (vector=%d%s, keyword=%d%s)",
            query[:50],
            len(fused.candidates),
            fused.vector_count,
            " failed" if vector_result.failed else "",
            fused.keyword_count,
            " failed" if keyword_result.failed else "",
        )

        return fused
