"""
Retrieval Contracts - Interfaces for embedding and product store collaborators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from xpertsearch.domains.search.models import FilterSet

from .models import RetrievalResult

if TYPE_CHECKING:
    import numpy as np


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Contract for query embedding."""

    async def embed(self, text: str) -> np.ndarray:
        """Embed text into a dense vector."""
        ...


@runtime_checkable
class ProductStore(Protocol):
    """
    Contract for the product datastore.

    Rows are plain mappings; ``candidate_from_row`` validates them into
    ``Candidate`` objects. Vector rows may carry a ``similarity`` key.
    """

    async def vector_search(
        self,
        embedding: np.ndarray,
        shop_id: str,
        filters: FilterSet,
        match_threshold: float,
        match_count: int,
    ) -> list[dict[str, Any]]:
        """Nearest products by embedding similarity."""
        ...

    async def keyword_search(
        self,
        terms: list[str],
        shop_id: str,
        filters: FilterSet,
        limit: int,
    ) -> list[dict[str, Any]]:
        """Products matching any term in any searchable field."""
        ...


@runtime_checkable
class Retriever(Protocol):
    """Contract for a single retrieval source."""

    source: str

    async def retrieve(
        self,
        query: str,
        shop_id: str,
        filters: FilterSet,
        limit: int,
    ) -> RetrievalResult:
        """Fetch candidates. Never raises; failures are reported on the result."""
        ...
