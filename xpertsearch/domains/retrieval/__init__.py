"""
Retrieval Domain - Vector and keyword candidate retrieval.

This domain handles:
- Query embedding and vector similarity retrieval
- Term matching with field-weighted keyword scores
- Store row validation into typed candidates
"""

from .contracts import EmbeddingProvider, ProductStore, Retriever
from .keyword import KeywordRetriever, score_keyword_match, split_terms
from .mapping import candidate_from_row, candidates_from_rows
from .models import RetrievalResult
from .vector import VectorRetriever

__all__ = [
    "EmbeddingProvider",
    "ProductStore",
    "Retriever",
    "RetrievalResult",
    "VectorRetriever",
    "KeywordRetriever",
    "score_keyword_match",
    "split_terms",
    "candidate_from_row",
    "candidates_from_rows",
]
