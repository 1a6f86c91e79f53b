"""
Tests for the OpenAI chat completions client.
"""

from __future__ import annotations

import json

import httpx
import pytest

from xpertsearch.config import LLMError

from .client import OpenAIClient
from .models import OpenAIConfig


def _client(handler) -> OpenAIClient:
    config = OpenAIConfig(api_key="sk-test")
    http = httpx.AsyncClient(
        base_url=config.base_url,
        transport=httpx.MockTransport(handler),
    )
    return OpenAIClient(config, http_client=http)


async def test_chat_sends_system_and_user_messages() -> None:
    """Test the request body and auth header."""
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "model": "gpt-3.5-turbo",
                "choices": [{"message": {"content": '{"rankings": []}'}}],
                "usage": {"prompt_tokens": 3, "completion_tokens": 4, "total_tokens": 7},
            },
        )

    client = _client(handler)
    response = await client.chat("Rank these", system_prompt="Respond with JSON.")

    assert seen["url"].endswith("/chat/completions")
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "Respond with JSON."},
        {"role": "user", "content": "Rank these"},
    ]
    assert seen["body"]["temperature"] == 0.1
    assert seen["body"]["max_tokens"] == 1500
    assert response.text == '{"rankings": []}'
    assert response.total_tokens == 7


@pytest.mark.parametrize("status", [429, 500])
async def test_chat_error_status_raises(status: int) -> None:
    """Test non-200 responses raise LLMError."""
    client = _client(lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(LLMError):
        await client.chat("Rank these")


async def test_chat_without_choices_raises() -> None:
    """Test an empty choices list is an error."""
    client = _client(lambda request: httpx.Response(200, json={"choices": []}))

    with pytest.raises(LLMError):
        await client.chat("Rank these")


async def test_chat_transport_error_raises() -> None:
    """Test connection errors are wrapped."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _client(handler)

    with pytest.raises(LLMError):
        await client.chat("Rank these")
