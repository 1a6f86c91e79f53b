"""
Ranking Contracts - Interfaces for ranking collaborators.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from xpertsearch.domains.search.models import Candidate, FilterSet, RankingOutcome


@runtime_checkable
class RankingProvider(Protocol):
    """Contract for an LLM that completes a ranking prompt."""

    model: str

    async def complete(self, prompt: str) -> str:
        """Return the raw model text for ``prompt``."""
        ...


@runtime_checkable
class Ranker(Protocol):
    """Contract for candidate re-ranking implementations."""

    async def rank(
        self,
        query: str,
        intent: str,
        filters: FilterSet,
        candidates: list[Candidate],
    ) -> RankingOutcome:
        """Reorder candidates. Never raises."""
        ...
