"""
Embeddings Adapter - Query and product text embeddings.
"""

from .embedder import SentenceTransformerEmbedder

__all__ = ["SentenceTransformerEmbedder"]
