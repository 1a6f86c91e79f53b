"""
LLM Adapter - Ordered provider chains over Gemini and OpenAI.

Usage:
    from xpertsearch.adapters.llm import build_ranking_providers

    providers = build_ranking_providers(get_settings())
    text = await providers[0].complete(prompt)
"""

from .service import (
    GeminiProvider,
    LLMResponse,
    OpenAIProvider,
    build_ranking_providers,
    build_understanding_providers,
)

__all__ = [
    "LLMResponse",
    "GeminiProvider",
    "OpenAIProvider",
    "build_ranking_providers",
    "build_understanding_providers",
]
