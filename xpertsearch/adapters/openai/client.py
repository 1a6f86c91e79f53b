"""
OpenAI Client - Chat completions over plain HTTP.

Secondary model for ranking and query understanding.
"""

from __future__ import annotations

import logging

import httpx

from xpertsearch.config import LLMError

from .models import OpenAIConfig, OpenAIResponse

logger = logging.getLogger(__name__)

__all__ = ["OpenAIClient"]


class OpenAIClient:
    """
    Minimal async client for ``POST /chat/completions``.

    Example:
        >>> client = OpenAIClient(OpenAIConfig(api_key="sk-..."))
        >>> response = await client.chat("Rank these", system_prompt="Respond with JSON.")
    """

    def __init__(
        self,
        config: OpenAIConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._client = http_client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
        )

    async def chat(
        self,
        prompt: str,
        system_prompt: str | None = None,
    ) -> OpenAIResponse:
        """
        Run a single-turn chat completion.

        Raises:
            LLMError: Transport failure, non-200 status or empty choices
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        body = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

        try:
            response = await self._client.post(
                "/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
            )
        except httpx.HTTPError as e:
            raise LLMError(f"OpenAI request failed: {e}") from e

        if response.status_code == 429:
            raise LLMError("OpenAI quota exceeded", {"code": "QUOTA_EXCEEDED"})

        if response.status_code != 200:
            logger.error("OpenAI error: %s %s", response.status_code, response.text)
            raise LLMError(f"OpenAI API error: {response.status_code}")

        data = response.json()
        choices = data.get("choices") or []
        if not choices:
            raise LLMError("OpenAI returned no choices")

        text = choices[0].get("message", {}).get("content") or ""
        usage = data.get("usage", {})

        return OpenAIResponse(
            text=text,
            model=data.get("model", self.config.model),
            total_tokens=usage.get("total_tokens", 0),
        )

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
