"""
Ranking Domain - Candidate re-ranking.

This domain handles:
- LLM ranking over small candidate sets (provider chain)
- Deterministic heuristic ranking
- Timeout-bounded fallback between the two
"""

from .contracts import Ranker, RankingProvider
from .engine import RankingEngine
from .heuristics import heuristic_score, heuristic_scores, rank_with_heuristics
from .llm import parse_llm_ranking, rank_with_llm
from .prompts import RANKING_SYSTEM_PROMPT, build_ranking_prompt

__all__ = [
    "Ranker",
    "RankingProvider",
    "RankingEngine",
    "heuristic_score",
    "heuristic_scores",
    "rank_with_heuristics",
    "parse_llm_ranking",
    "rank_with_llm",
    "build_ranking_prompt",
    "RANKING_SYSTEM_PROMPT",
]
