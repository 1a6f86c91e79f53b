"""
Heuristic Ranker - Deterministic scoring for large sets and LLM fallback.
"""

from __future__ import annotations

from xpertsearch.domains.search.models import Candidate, FilterSet, RankingOutcome

__all__ = ["heuristic_score", "heuristic_scores", "rank_with_heuristics", "HEURISTIC_MODEL"]

HEURISTIC_MODEL = "heuristic"
HEURISTIC_REASONING = (
    "Ranked using heuristic scoring: semantic similarity + filter matches "
    "+ availability + title relevance"
)


def heuristic_score(
    candidate: Candidate,
    query_words: list[str],
    intent: str,
    filters: FilterSet,
) -> float:
    """
    Score one candidate.

    Starts from ``similarity_score`` and adds availability, filter-match,
    tag, title-word and intent adjustments. May fall outside [0, 1].
    """
    score = candidate.similarity_score

    score += 0.1 if candidate.available else -0.2

    if filters.price_max and candidate.price_min and candidate.price_min <= filters.price_max:
        score += 0.15
    if filters.price_min and candidate.price_max and candidate.price_max >= filters.price_min:
        score += 0.1

    if filters.product_type and candidate.product_type:
        if filters.product_type.lower() in candidate.product_type.lower():
            score += 0.2
    if filters.vendor and candidate.vendor:
        if filters.vendor.lower() in candidate.vendor.lower():
            score += 0.15

    if filters.tags and candidate.tags:
        product_tags = [t.lower() for t in candidate.tags]
        matching = [t for t in filters.tags if any(t.lower() in pt for pt in product_tags)]
        score += 0.05 * len(matching)

    title_words = candidate.title.lower().split()
    title_matches = [
        word for word in query_words if any(tw in word or word in tw for tw in title_words)
    ]
    score += 0.1 * len(title_matches)

    if intent == "recommendation" and candidate.price_min and candidate.price_min > 50:
        score += 0.05

    return score


def heuristic_scores(
    query: str,
    intent: str,
    filters: FilterSet,
    candidates: list[Candidate],
) -> list[float]:
    """Heuristic scores aligned with ``candidates``."""
    query_words = query.lower().split()
    return [heuristic_score(c, query_words, intent, filters) for c in candidates]


def rank_with_heuristics(
    query: str,
    intent: str,
    filters: FilterSet,
    candidates: list[Candidate],
) -> RankingOutcome:
    """Order candidates by heuristic score, descending. Ties keep input order."""
    scores = heuristic_scores(query, intent, filters, candidates)
    scored = [c.model_copy(update={"rank_score": s}) for c, s in zip(candidates, scores)]
    scored.sort(key=lambda c: c.rank_score, reverse=True)

    return RankingOutcome(
        ranked_products=scored,
        reasoning=HEURISTIC_REASONING,
        model_used=HEURISTIC_MODEL,
    )
