"""
Analytics Contracts - Interface for search event sinks.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import SearchEvent


@runtime_checkable
class AnalyticsSink(Protocol):
    """Contract for search analytics. Callers never observe the outcome."""

    async def log_search(self, event: SearchEvent) -> None:
        """Record a served search."""
        ...
