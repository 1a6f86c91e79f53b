"""
Ranking Engine - LLM ranking for small sets, heuristic ranking otherwise.

The LLM stage is raced against a timeout. On timeout the in-flight call
is cancelled and the heuristic ranking is returned.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from xpertsearch.domains.search.models import Candidate, FilterSet, RankingOutcome

from .heuristics import rank_with_heuristics
from .llm import rank_with_llm

if TYPE_CHECKING:
    from .contracts import RankingProvider

logger = logging.getLogger(__name__)

__all__ = ["RankingEngine"]


class RankingEngine:
    """
    Re-orders candidates. Never raises.

    Example:
        >>> engine = RankingEngine([gemini_provider, openai_provider])
        >>> outcome = await engine.rank("red dress", "product_search", FilterSet(), candidates)
        >>> outcome.model_used
        'gemini-1.5-flash'
    """

    def __init__(
        self,
        providers: list[RankingProvider] | None = None,
        llm_candidate_limit: int = 10,
        timeout_seconds: float = 5.0,
    ) -> None:
        """
        Initialize ranking engine.

        Args:
            providers: LLM providers in priority order (may be empty)
            llm_candidate_limit: Largest candidate set sent to an LLM
            timeout_seconds: Budget for the whole LLM stage
        """
        self._providers = list(providers or [])
        self._llm_limit = llm_candidate_limit
        self._timeout = timeout_seconds

    @property
    def providers(self) -> list[RankingProvider]:
        return list(self._providers)

    async def rank(
        self,
        query: str,
        intent: str,
        filters: FilterSet,
        candidates: list[Candidate],
    ) -> RankingOutcome:
        """
        Rank candidates.

        Args:
            query: Search text (expanded query on the ai path)
            intent: Parsed intent, e.g. "product_search" or "recommendation"
            filters: Effective filters
            candidates: Fused candidates

        Returns:
            RankingOutcome over exactly the input candidates
        """
        if not candidates:
            return RankingOutcome(ranked_products=[], model_used="none")

        if self._providers and len(candidates) <= self._llm_limit:
            outcome = await self._rank_with_llm(query, intent, filters, candidates)
            if outcome is not None:
                return outcome

        return rank_with_heuristics(query, intent, filters, candidates)

    async def _rank_with_llm(
        self,
        query: str,
        intent: str,
        filters: FilterSet,
        candidates: list[Candidate],
    ) -> RankingOutcome | None:
        try:
            outcome = await asyncio.wait_for(
                rank_with_llm(self._providers, query, intent, filters, candidates),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "LLM ranking timed out after %.1fs, using heuristic ranking",
                self._timeout,
            )
            return None
        except Exception as e:
            logger.warning("LLM ranking failed, using heuristic ranking: %s", e)
            return None

        if outcome is None:
            logger.info("No LLM provider produced a ranking, using heuristic ranking")
        else:
            logger.info(
                "LLM ranking: %d candidates ranked by %s",
                len(outcome.ranked_products),
                outcome.model_used,
            )
        return outcome
