"""
LLM Service - Provider chain for ranking and query understanding.

Routes between:
- Gemini (primary, when an API key is configured)
- OpenAI (secondary, when an API key is configured)

Both providers expose ``model`` and ``complete(prompt)`` so the ranking
engine and the query parser can try them in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from xpertsearch.adapters.gemini import GeminiClient, GeminiConfig
from xpertsearch.adapters.openai import OpenAIClient, OpenAIConfig
from xpertsearch.domains.ranking.prompts import RANKING_SYSTEM_PROMPT
from xpertsearch.domains.understanding.parser import UNDERSTANDING_SYSTEM_PROMPT

if TYPE_CHECKING:
    from xpertsearch.config import Settings

logger = logging.getLogger(__name__)

__all__ = [
    "LLMResponse",
    "GeminiProvider",
    "OpenAIProvider",
    "build_ranking_providers",
    "build_understanding_providers",
]

RANKING_MAX_TOKENS = 1500
UNDERSTANDING_MAX_TOKENS = 1000


@dataclass
class LLMResponse:
    """Response from LLM generation."""

    text: str
    model: str
    provider: str  # "gemini" or "openai"
    tokens_used: int | None = None


class GeminiProvider:
    """Gemini-backed completion provider."""

    def __init__(self, client: GeminiClient, system_instruction: str | None = None) -> None:
        self._client = client
        self._system_instruction = system_instruction
        self.model = client.config.model

    async def generate(self, prompt: str) -> LLMResponse:
        response = await self._client.generate(prompt, self._system_instruction)
        return LLMResponse(
            text=response.text,
            model=self.model,
            provider="gemini",
            tokens_used=response.total_tokens,
        )

    async def complete(self, prompt: str) -> str:
        return (await self.generate(prompt)).text


class OpenAIProvider:
    """OpenAI-backed completion provider."""

    def __init__(self, client: OpenAIClient, system_prompt: str | None = None) -> None:
        self._client = client
        self._system_prompt = system_prompt
        self.model = client.config.model

    async def generate(self, prompt: str) -> LLMResponse:
        response = await self._client.chat(prompt, self._system_prompt)
        return LLMResponse(
            text=response.text,
            model=self.model,
            provider="openai",
            tokens_used=response.total_tokens,
        )

    async def complete(self, prompt: str) -> str:
        return (await self.generate(prompt)).text

    async def close(self) -> None:
        await self._client.close()


def _build_providers(
    settings: Settings,
    system_prompt: str,
    max_tokens: int,
) -> list[GeminiProvider | OpenAIProvider]:
    providers: list[GeminiProvider | OpenAIProvider] = []

    if settings.gemini_api_key:
        gemini = GeminiClient(
            GeminiConfig(
                model=settings.gemini_model,
                api_key=settings.gemini_api_key,
                temperature=settings.gemini_temperature,
                max_output_tokens=max_tokens,
                rate_limit_rpm=settings.gemini_rate_limit_rpm,
            )
        )
        providers.append(GeminiProvider(gemini, system_prompt))

    if settings.openai_api_key:
        openai = OpenAIClient(
            OpenAIConfig(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                base_url=settings.openai_base_url,
                temperature=settings.gemini_temperature,
                max_tokens=max_tokens,
                timeout_seconds=settings.openai_timeout_seconds,
            )
        )
        providers.append(OpenAIProvider(openai, system_prompt))

    if not providers:
        logger.warning("No LLM API keys configured; heuristic ranking only")

    return providers


def build_ranking_providers(settings: Settings) -> list[GeminiProvider | OpenAIProvider]:
    """Build the ranking provider chain, primary first."""
    return _build_providers(settings, RANKING_SYSTEM_PROMPT, RANKING_MAX_TOKENS)


def build_understanding_providers(settings: Settings) -> list[GeminiProvider | OpenAIProvider]:
    """Build the query understanding provider chain, primary first."""
    return _build_providers(settings, UNDERSTANDING_SYSTEM_PROMPT, UNDERSTANDING_MAX_TOKENS)
