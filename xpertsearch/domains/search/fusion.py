"""
Fusion - Reciprocal Rank Fusion over vector and keyword candidate lists.

Vector similarity and keyword-match scores are not on comparable scales,
so fusion works on ranks only: a candidate at zero-based rank ``r`` in a
list weighted ``w`` contributes ``w / (k + r + 1)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import Candidate, FusedResult

logger = logging.getLogger(__name__)

__all__ = ["FusionWeights", "reciprocal_rank_fusion", "DEFAULT_RRF_K"]

DEFAULT_RRF_K = 60


@dataclass(frozen=True)
class FusionWeights:
    """Per-source RRF weights."""

    vector: float = 0.7
    keyword: float = 0.3


def reciprocal_rank_fusion(
    vector: list[Candidate],
    keyword: list[Candidate],
    weights: FusionWeights | None = None,
    k: int = DEFAULT_RRF_K,
) -> FusedResult:
    """
    Fuse two ranked candidate lists.

    Candidates are matched by ``Candidate.identity``. The output holds every
    distinct candidate once, sorted by fused score descending, with
    ``similarity_score`` replaced by the fused score. Equal scores keep the
    insertion order of the higher-weighted list.

    Args:
        vector: Candidates ordered by vector similarity
        keyword: Candidates ordered by keyword score
        weights: Source weights (default 0.7 vector / 0.3 keyword)
        k: RRF smoothing constant

    Returns:
        FusedResult with fused candidates and per-source counts
    """
    weights = weights or FusionWeights()

    sources = [(vector, weights.vector), (keyword, weights.keyword)]
    # Stable sort keeps the first-inserted source ahead on ties
    sources.sort(key=lambda source: source[1], reverse=True)

    scores: dict[str, float] = {}
    products: dict[str, Candidate] = {}

    for candidates, weight in sources:
        for rank, candidate in enumerate(candidates):
            key = candidate.identity
            scores[key] = scores.get(key, 0.0) + weight / (k + rank + 1)
            products.setdefault(key, candidate)

    ordered = sorted(scores, key=lambda key: scores[key], reverse=True)

    fused = [
        products[key].model_copy(update={"similarity_score": min(1.0, scores[key])})
        for key in ordered
    ]

    logger.debug(
        "RRF fused %d candidates (vector=%d, keyword=%d, k=%d)",
        len(fused),
        len(vector),
        len(keyword),
        k,
    )

    return FusedResult(
        candidates=fused,
        vector_count=len(vector),
        keyword_count=len(keyword),
    )
