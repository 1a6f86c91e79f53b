"""
Retrieval Models - Per-source retrieval outcomes.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from xpertsearch.domains.search.models import Candidate


class RetrievalResult(BaseModel):
    """
    Candidates from one retrieval source.

    ``error`` distinguishes a failed source from one that matched nothing.
    """

    source: str
    candidates: list[Candidate] = Field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(cls, source: str, error: Exception | str) -> RetrievalResult:
        return cls(source=source, error=str(error) or type(error).__name__)
