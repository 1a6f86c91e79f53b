"""
Search Orchestrator - Strategy selection, pipelines and fallback policy.

Pipelines:
- vector: vector retrieval ordered by similarity
- keyword: keyword retrieval ordered by keyword score
- hybrid: cache -> concurrent retrieval -> RRF -> ranking -> cache write
- ai: spelling -> query understanding -> synonym expansion -> hybrid with
  merged filters, under a timeout

Any pipeline error triggers one re-run with the fallback strategy and
caching disabled. ``search`` never raises.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from xpertsearch.config.errors import ErrorCode, StrategyError
from xpertsearch.domains.analytics.models import SearchEvent
from xpertsearch.domains.cache.models import CachedResult
from xpertsearch.domains.facets import FacetSet, generate_facets
from xpertsearch.domains.understanding.expansion import expand_query_terms
from xpertsearch.domains.understanding.models import ParsedQuery

from .background import BestEffortRunner
from .fusion import DEFAULT_RRF_K, FusionWeights
from .hybrid_search import HybridSearchEngine
from .models import (
    Candidate,
    FilterSet,
    ProductDTO,
    QueryInfo,
    RankingInfo,
    SearchConfig,
    SearchRequest,
    SearchResult,
    SearchStrategy,
)
from .shop_config import StaticConfigProvider
from .sorting import paginate, sort_candidates

if TYPE_CHECKING:
    from xpertsearch.domains.analytics import AnalyticsSink
    from xpertsearch.domains.cache import SearchCache
    from xpertsearch.domains.ranking import Ranker
    from xpertsearch.domains.retrieval import KeywordRetriever, VectorRetriever
    from xpertsearch.domains.understanding import QueryUnderstanding
    from xpertsearch.domains.understanding.spelling import SpellCorrector

    from .contracts import SearchConfigProvider

logger = logging.getLogger(__name__)

__all__ = ["SearchOrchestrator"]

DEFAULT_INTENT = "product_search"


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _PipelineRun:
    """Full ranked list produced by one pipeline, before sort/pagination."""

    products: list[Candidate]
    filters: FilterSet
    ranking_info: RankingInfo | None = None
    processed_query: str | None = None
    debug: dict[str, Any] = field(default_factory=dict)


class SearchOrchestrator:
    """
    Top-level search entry point.

    Example:
        >>> orchestrator = SearchOrchestrator(vector, keyword, ranking_engine, cache=cache)
        >>> result = await orchestrator.search(SearchRequest(query="red dress", shop_id="shop-1"))
        >>> result.search_method
        <SearchStrategy.AI: 'ai'>
    """

    def __init__(
        self,
        vector_retriever: VectorRetriever,
        keyword_retriever: KeywordRetriever,
        ranking_engine: Ranker,
        cache: SearchCache | None = None,
        query_understanding: QueryUnderstanding | None = None,
        analytics: AnalyticsSink | None = None,
        config_provider: SearchConfigProvider | None = None,
        runner: BestEffortRunner | None = None,
        weights: FusionWeights | None = None,
        rrf_k: int = DEFAULT_RRF_K,
        search_timeout_ms: int = 5000,
        facet_superset_limit: int = 200,
        spell_corrector: SpellCorrector | None = None,
        expansion_max_terms: int = 0,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            vector_retriever: Embedding similarity retriever
            keyword_retriever: Term matching retriever
            ranking_engine: Re-ranker for hybrid results
            cache: First-page result cache (None disables caching)
            query_understanding: Parser for the ai strategy
            analytics: Search event sink
            config_provider: Per-shop configuration lookup
            runner: Background runner for cache writes and analytics
            weights: RRF source weights
            rrf_k: RRF constant
            search_timeout_ms: Budget for the whole ai pipeline
            facet_superset_limit: Candidates aggregated for facets
            spell_corrector: Typo repair applied before query understanding
            expansion_max_terms: Synonyms appended to the ai query (0 disables)
        """
        self._vector = vector_retriever
        self._keyword = keyword_retriever
        self._hybrid = HybridSearchEngine(vector_retriever, keyword_retriever, weights, rrf_k)
        self._ranking = ranking_engine
        self._cache = cache
        self._understanding = query_understanding
        self._analytics = analytics
        self._config_provider = config_provider or StaticConfigProvider()
        self._runner = runner or BestEffortRunner()
        self._timeout = search_timeout_ms / 1000
        self._facet_limit = facet_superset_limit
        self._speller = spell_corrector
        self._expansion_max_terms = expansion_max_terms

    @property
    def runner(self) -> BestEffortRunner:
        return self._runner

    async def search(self, request: SearchRequest) -> SearchResult:
        """
        Execute a search request.

        Args:
            request: Search request

        Returns:
            SearchResult, empty with an ``error-`` search id if every
            attempted strategy failed
        """
        return await self._search(request, time.perf_counter(), is_fallback=False)

    async def _search(
        self,
        request: SearchRequest,
        started: float,
        is_fallback: bool,
    ) -> SearchResult:
        config = await self._resolve_config(request.shop_id)
        strategy = request.strategy or config.default_strategy

        try:
            run, facets = await self._run_with_facets(strategy, request, config)
        except Exception as e:
            if not is_fallback and strategy != config.fallback_strategy:
                logger.warning(
                    "%s search failed for shop %s, falling back to %s: %s",
                    strategy.value,
                    request.shop_id,
                    config.fallback_strategy.value,
                    e,
                )
                fallback = request.model_copy(
                    update={"strategy": config.fallback_strategy, "use_cache": False}
                )
                return await self._search(fallback, started, is_fallback=True)

            logger.error(
                "%s search failed for shop %s with no fallback left: %s",
                strategy.value,
                request.shop_id,
                e,
            )
            return self._error_result(request, strategy, e, started)

        result = self._build_result(request, strategy, run, facets, started)

        if config.enable_analytics and self._analytics is not None:
            self._runner.submit(
                self._analytics.log_search(
                    SearchEvent(
                        query=request.query,
                        shop_id=request.shop_id,
                        results_count=result.total_count,
                        search_method=strategy.value,
                        processing_time_ms=result.processing_time_ms,
                        search_id=result.search_id,
                        filters=run.filters.cache_payload(),
                        model_used=result.ranking_info.model_used if result.ranking_info else None,
                        session_id=request.session_id,
                        user_agent=request.user_agent,
                    )
                ),
                name="analytics",
            )

        logger.info(
            "Search '%s' shop=%s method=%s -> %d/%d results in %dms",
            request.query[:50],
            request.shop_id,
            strategy.value,
            len(result.products),
            result.total_count,
            result.processing_time_ms,
        )
        return result

    async def _resolve_config(self, shop_id: str) -> SearchConfig:
        try:
            return await self._config_provider.get_config(shop_id)
        except Exception as e:
            logger.warning("Config lookup failed for shop %s, using defaults: %s", shop_id, e)
            return SearchConfig()

    async def _run_with_facets(
        self,
        strategy: SearchStrategy,
        request: SearchRequest,
        config: SearchConfig,
    ) -> tuple[_PipelineRun, FacetSet | None]:
        if not request.include_facets:
            return await self._execute(strategy, request, config), None

        facets_task = asyncio.create_task(self._facets(request))
        try:
            run = await self._execute(strategy, request, config)
        except BaseException:
            facets_task.cancel()
            raise
        return run, await facets_task

    async def _execute(
        self,
        strategy: SearchStrategy,
        request: SearchRequest,
        config: SearchConfig,
    ) -> _PipelineRun:
        if strategy == SearchStrategy.VECTOR:
            return await self._vector_pipeline(request, config)
        if strategy == SearchStrategy.KEYWORD:
            return await self._keyword_pipeline(request)
        if strategy == SearchStrategy.HYBRID:
            return await self._hybrid_pipeline(
                request, request.query, request.filters, DEFAULT_INTENT, config
            )
        if strategy == SearchStrategy.AI:
            try:
                return await asyncio.wait_for(self._ai_pipeline(request, config), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                raise StrategyError(
                    f"AI search exceeded {int(self._timeout * 1000)}ms",
                    code=ErrorCode.SEARCH_TIMEOUT,
                ) from e
        raise StrategyError(f"Unknown strategy: {strategy}", code=ErrorCode.STRATEGY_UNKNOWN)

    async def _vector_pipeline(self, request: SearchRequest, config: SearchConfig) -> _PipelineRun:
        result = await self._vector.retrieve(
            request.query,
            request.shop_id,
            request.filters,
            request.offset + request.limit,
            match_threshold=config.vector_threshold,
        )
        if result.failed:
            raise StrategyError("Vector retrieval failed", details={"vector": result.error})

        return _PipelineRun(
            products=result.candidates,
            filters=request.filters,
            ranking_info=RankingInfo(model_used="none"),
            debug={"vector_count": len(result.candidates)},
        )

    async def _keyword_pipeline(self, request: SearchRequest) -> _PipelineRun:
        result = await self._keyword.retrieve(
            request.query,
            request.shop_id,
            request.filters,
            request.offset + request.limit,
        )
        if result.failed:
            raise StrategyError("Keyword retrieval failed", details={"keyword": result.error})

        return _PipelineRun(
            products=result.candidates,
            filters=request.filters,
            ranking_info=RankingInfo(model_used="none"),
            debug={"keyword_count": len(result.candidates)},
        )

    async def _hybrid_pipeline(
        self,
        request: SearchRequest,
        query: str,
        filters: FilterSet,
        intent: str,
        config: SearchConfig,
    ) -> _PipelineRun:
        use_cache = request.use_cache and self._cache is not None

        if use_cache:
            cached = await self._cache.get(
                query, request.shop_id, filters, offset=request.offset, limit=request.limit
            )
            if cached is not None:
                return _PipelineRun(
                    products=cached.products,
                    filters=filters,
                    ranking_info=RankingInfo(model_used=cached.model_used, reasoning=cached.reasoning),
                    debug={"cache_hit": True},
                )

        fused = await self._hybrid.search(
            query,
            request.shop_id,
            filters,
            request.offset + request.limit,
            match_threshold=config.vector_threshold,
        )
        outcome = await self._ranking.rank(query, intent, filters, fused.candidates)

        if use_cache and outcome.ranked_products:
            self._runner.submit(
                self._cache.set(
                    query,
                    request.shop_id,
                    filters,
                    CachedResult(
                        products=outcome.ranked_products,
                        total_count=len(outcome.ranked_products),
                        search_id=f"hybrid-{_epoch_ms()}",
                        model_used=outcome.model_used,
                        reasoning=outcome.reasoning,
                    ),
                    offset=request.offset,
                    limit=request.limit,
                ),
                name="cache-write",
            )

        return _PipelineRun(
            products=outcome.ranked_products,
            filters=filters,
            ranking_info=RankingInfo(model_used=outcome.model_used, reasoning=outcome.reasoning),
            debug={
                "cache_hit": False,
                "vector_count": fused.vector_count,
                "keyword_count": fused.keyword_count,
            },
        )

    async def _ai_pipeline(self, request: SearchRequest, config: SearchConfig) -> _PipelineRun:
        corrected = self._speller.correct(request.query) if self._speller else request.query
        parsed = await self._parse_query(corrected)
        # Request filters win over parsed ones
        filters = parsed.filters.merged(request.filters)
        query = parsed.query_text.strip() or corrected

        expanded = expand_query_terms(query, self._expansion_max_terms)
        if expanded:
            query = f"{query} {' '.join(expanded)}"

        run = await self._hybrid_pipeline(request, query, filters, parsed.intent.value, config)
        run.processed_query = query
        run.debug.update(
            {
                "intent": parsed.intent.value,
                "confidence": parsed.confidence,
                "corrected_query": corrected if corrected != request.query else None,
                "expanded_terms": expanded,
            }
        )
        return run

    async def _parse_query(self, text: str) -> ParsedQuery:
        if self._understanding is None:
            return ParsedQuery.fallback(text)
        try:
            return await self._understanding.parse(text)
        except Exception as e:
            logger.warning("Query understanding failed, using raw query: %s", e)
            return ParsedQuery.fallback(text)

    async def _facets(self, request: SearchRequest) -> FacetSet | None:
        """Facets over the unfiltered match space. Failure yields None."""
        try:
            fused = await self._hybrid.search(
                request.query,
                request.shop_id,
                FilterSet(),
                self._facet_limit,
            )
        except Exception as e:
            logger.warning("Facet generation failed for shop %s: %s", request.shop_id, e)
            return None
        return generate_facets(fused.candidates[: self._facet_limit])

    def _build_result(
        self,
        request: SearchRequest,
        strategy: SearchStrategy,
        run: _PipelineRun,
        facets: FacetSet | None,
        started: float,
    ) -> SearchResult:
        total = len(run.products)
        ordered = sort_candidates(run.products, request.sort_by)
        page = paginate(ordered, request.offset, request.limit)

        debug_info = None
        if request.debug:
            debug_info = {"strategy": strategy.value, "sort_by": request.sort_by.value, **run.debug}

        return SearchResult(
            products=[ProductDTO.from_candidate(c, include_score=request.debug) for c in page],
            total_count=total,
            has_more=request.offset + request.limit < total,
            query_info=QueryInfo(
                original_query=request.query,
                processed_query=run.processed_query,
                filters_applied=run.filters,
                search_method=strategy,
                processing_time_ms=int((time.perf_counter() - started) * 1000),
            ),
            ranking_info=run.ranking_info,
            search_id=f"{strategy.value}-{_epoch_ms()}",
            facets=facets,
            debug_info=debug_info,
        )

    def _error_result(
        self,
        request: SearchRequest,
        strategy: SearchStrategy,
        error: Exception,
        started: float,
    ) -> SearchResult:
        return SearchResult(
            products=[],
            total_count=0,
            has_more=False,
            query_info=QueryInfo(
                original_query=request.query,
                filters_applied=request.filters,
                search_method=strategy,
                processing_time_ms=int((time.perf_counter() - started) * 1000),
            ),
            search_id=f"error-{_epoch_ms()}",
            debug_info={"error": str(error), "strategy": strategy.value} if request.debug else None,
        )
