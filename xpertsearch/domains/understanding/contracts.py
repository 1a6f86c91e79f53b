"""
Understanding Contracts - Interface for query parsing.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import ParsedQuery


@runtime_checkable
class QueryUnderstanding(Protocol):
    """Contract for natural-language query parsing."""

    async def parse(self, text: str) -> ParsedQuery:
        """Parse shopper text. May raise; callers fall back to the raw query."""
        ...
