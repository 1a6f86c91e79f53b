"""
Search Domain - Hybrid product search with ranked, paginated results.

This domain handles:
- Search request/result models
- Reciprocal Rank Fusion
- Hybrid retrieval
- Best-effort side effects

The orchestrator lives in ``xpertsearch.domains.search.orchestrator`` and
is imported from there directly.
"""

from .background import BestEffortRunner
from .contracts import SearchConfigProvider, SearchService
from .fusion import FusionWeights, reciprocal_rank_fusion
from .hybrid_search import HybridSearchEngine
from .models import (
    Candidate,
    FilterSet,
    FusedResult,
    ProductDTO,
    QueryInfo,
    RankingInfo,
    RankingOutcome,
    SearchConfig,
    SearchRequest,
    SearchResult,
    SearchStrategy,
    SortBy,
)

__all__ = [
    "SearchService",
    "SearchConfigProvider",
    "SearchRequest",
    "SearchResult",
    "SearchConfig",
    "SearchStrategy",
    "SortBy",
    "FilterSet",
    "Candidate",
    "FusedResult",
    "RankingOutcome",
    "ProductDTO",
    "QueryInfo",
    "RankingInfo",
    "FusionWeights",
    "reciprocal_rank_fusion",
    "HybridSearchEngine",
    "BestEffortRunner",
]
