"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .embeddings import SentenceTransformerEmbedder
from .faiss import FAISSIndex
from .gemini import GeminiClient
from .llm import LLMResponse, build_ranking_providers, build_understanding_providers
from .openai import OpenAIClient
from .redis import RedisCacheBackend
from .sqlite import SQLiteProductStore

__all__ = [
    # Storage
    "SQLiteProductStore",
    "FAISSIndex",
    "RedisCacheBackend",
    # Models
    "SentenceTransformerEmbedder",
    "GeminiClient",
    "OpenAIClient",
    # Provider chains (Gemini first, OpenAI second)
    "LLMResponse",
    "build_ranking_providers",
    "build_understanding_providers",
]
