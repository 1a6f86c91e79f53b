"""
Tests for the LLM provider chain.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

from xpertsearch.config import Settings
from xpertsearch.domains.ranking.contracts import RankingProvider

from .service import (
    GeminiProvider,
    OpenAIProvider,
    build_ranking_providers,
    build_understanding_providers,
)


def _settings(**overrides) -> Settings:
    values = {"gemini_api_key": None, "openai_api_key": None, **overrides}
    return Settings(_env_file=None, **values)


def test_no_keys_no_providers() -> None:
    """Test an unconfigured deployment ranks heuristically."""
    assert build_ranking_providers(_settings()) == []


def test_gemini_first_then_openai() -> None:
    """Test the provider chain is ordered primary first."""
    with patch("xpertsearch.adapters.gemini.client.genai"):
        providers = build_ranking_providers(
            _settings(gemini_api_key="g-key", openai_api_key="sk-key")
        )

    assert [type(p) for p in providers] == [GeminiProvider, OpenAIProvider]
    assert providers[0].model == "gemini-1.5-flash"
    assert providers[1].model == "gpt-3.5-turbo"
    assert all(isinstance(p, RankingProvider) for p in providers)


def test_understanding_uses_smaller_token_budget() -> None:
    """Test the understanding chain caps output at 1000 tokens."""
    providers = build_understanding_providers(_settings(openai_api_key="sk-key"))

    assert len(providers) == 1
    assert providers[0]._client.config.max_tokens == 1000


async def test_gemini_provider_complete_passes_system_instruction() -> None:
    """Test the provider returns the raw text."""
    client = MagicMock()
    client.config.model = "gemini-1.5-flash"
    client.generate = AsyncMock(return_value=MagicMock(text="ok", total_tokens=5))

    provider = GeminiProvider(client, "Respond with JSON.")

    assert await provider.complete("Rank these") == "ok"
    client.generate.assert_awaited_once_with("Rank these", "Respond with JSON.")


async def test_openai_provider_generate_reports_provider() -> None:
    """Test responses are tagged with their provider."""
    client = MagicMock()
    client.config.model = "gpt-3.5-turbo"
    client.chat = AsyncMock(return_value=MagicMock(text="ok", total_tokens=9))

    response = await OpenAIProvider(client, "sys").generate("Rank these")

    assert response.provider == "openai"
    assert response.tokens_used == 9
