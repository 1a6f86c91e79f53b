"""
API Dependencies - Service wiring and dependency injection for FastAPI routes.

Shared clients are built once in the application lifespan and stored on
``app.state.services``. Routes reach them through the ``get_*`` helpers,
which tests replace with ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from fastapi import Request

from xpertsearch.adapters.embeddings import SentenceTransformerEmbedder
from xpertsearch.adapters.faiss import FAISSIndex
from xpertsearch.adapters.llm import (
    OpenAIProvider,
    build_ranking_providers,
    build_understanding_providers,
)
from xpertsearch.adapters.redis import RedisCacheBackend
from xpertsearch.adapters.sqlite import SQLiteProductStore
from xpertsearch.config import Settings
from xpertsearch.domains.analytics import LoggingAnalyticsSink
from xpertsearch.domains.cache import CacheBackend, InMemoryCacheBackend, SearchCache
from xpertsearch.domains.ranking import RankingEngine
from xpertsearch.domains.retrieval import KeywordRetriever, VectorRetriever
from xpertsearch.domains.search import BestEffortRunner, FusionWeights
from xpertsearch.domains.search.orchestrator import SearchOrchestrator
from xpertsearch.domains.search.shop_config import SettingsConfigProvider
from xpertsearch.domains.understanding import LLMQueryParser, SpellCorrector

logger = logging.getLogger(__name__)

__all__ = ["ServiceContainer", "get_orchestrator", "get_search_cache", "build_cache_backend"]


def build_cache_backend(settings: Settings) -> CacheBackend | None:
    """Select the cache backend named by ``settings.cache_backend``."""
    kind = settings.cache_backend.lower()
    if kind == "redis":
        if not settings.redis_url:
            logger.warning("cache_backend=redis but REDIS_URL is not set; caching disabled")
            return None
        return RedisCacheBackend(settings.redis_url)
    if kind == "memory":
        return InMemoryCacheBackend(max_size=settings.cache_max_entries)
    if kind != "none":
        logger.warning("Unknown cache backend '%s'; caching disabled", settings.cache_backend)
    return None


@dataclass
class ServiceContainer:
    """Long-lived services shared by every request."""

    settings: Settings
    store: SQLiteProductStore
    cache: SearchCache
    orchestrator: SearchOrchestrator
    runner: BestEffortRunner
    providers: list = field(default_factory=list)

    @classmethod
    async def create(cls, settings: Settings) -> ServiceContainer:
        """Build and initialize every service from settings."""
        store = SQLiteProductStore(
            settings.db_path,
            index=FAISSIndex(dimension=settings.embedding_dimension),
            index_path=settings.faiss_index_path,
        )
        await store.initialize()

        embedder = SentenceTransformerEmbedder(
            settings.embedding_model,
            dimension=settings.embedding_dimension,
        )
        ranking_providers = build_ranking_providers(settings)
        understanding_providers = build_understanding_providers(settings)

        cache = SearchCache(build_cache_backend(settings), ttl_seconds=settings.cache_ttl)
        runner = BestEffortRunner(timeout=settings.best_effort_timeout_seconds)

        orchestrator = SearchOrchestrator(
            vector_retriever=VectorRetriever(
                store,
                embedder,
                match_threshold=settings.vector_threshold,
                over_fetch_factor=settings.vector_over_fetch_factor,
                placeholder_similarity=settings.vector_placeholder_similarity,
            ),
            keyword_retriever=KeywordRetriever(
                store,
                over_fetch_factor=settings.vector_over_fetch_factor,
            ),
            ranking_engine=RankingEngine(
                ranking_providers,
                llm_candidate_limit=settings.llm_ranking_max_candidates,
                timeout_seconds=settings.ranking_timeout_seconds,
            ),
            cache=cache,
            query_understanding=LLMQueryParser(understanding_providers),
            analytics=LoggingAnalyticsSink(),
            config_provider=SettingsConfigProvider(settings),
            runner=runner,
            weights=FusionWeights(settings.rrf_vector_weight, settings.rrf_keyword_weight),
            rrf_k=settings.rrf_k,
            search_timeout_ms=settings.search_timeout_ms,
            facet_superset_limit=settings.facet_superset_limit,
            spell_corrector=SpellCorrector() if settings.spell_correction_enabled else None,
            expansion_max_terms=settings.query_expansion_max_terms,
        )

        logger.info(
            "Services ready: cache=%s, ranking providers=%s",
            settings.cache_backend if cache.enabled else "disabled",
            [p.model for p in ranking_providers] or "heuristic only",
        )

        return cls(
            settings=settings,
            store=store,
            cache=cache,
            orchestrator=orchestrator,
            runner=runner,
            providers=[*ranking_providers, *understanding_providers],
        )

    async def close(self) -> None:
        """Drain background work and release connections."""
        await self.runner.drain(timeout=self.settings.best_effort_timeout_seconds)
        await self.cache.close()
        for provider in self.providers:
            if isinstance(provider, OpenAIProvider):
                await provider.close()
        await self.store.close()


def _services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_orchestrator(request: Request) -> SearchOrchestrator:
    """Get the shared search orchestrator."""
    return _services(request).orchestrator


def get_search_cache(request: Request) -> SearchCache:
    """Get the shared search cache."""
    return _services(request).cache
