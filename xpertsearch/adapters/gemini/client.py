"""
Gemini Client - Google Gemini API client for ranking and query parsing.

This is the only module that calls the Gemini API.

Authentication:
- Uses ``GEMINI_API_KEY`` when configured
- Falls back to Application Default Credentials otherwise

Calls sit on the search hot path, so the per-minute budget is enforced
without waiting: an exhausted budget raises ``RateLimitError`` and the
caller moves on to its next provider or to heuristics.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .models import GeminiConfig, GeminiResponse

logger = logging.getLogger(__name__)

__all__ = [
    "GeminiClient",
    "GeminiError",
    "GeminiAPIError",
    "GeminiRequestError",
    "RateLimitError",
]

_REJECTED = (
    google_exceptions.InvalidArgument,
    google_exceptions.PermissionDenied,
    google_exceptions.Unauthenticated,
)


class GeminiError(Exception):
    """Base class for Gemini adapter failures."""


class RateLimitError(GeminiError):
    """Local or remote request budget exhausted."""


class GeminiAPIError(GeminiError):
    """Transient API failure. Retried once."""


class GeminiRequestError(GeminiError):
    """Request rejected or no usable text returned. Not retried."""


class GeminiClient:
    """
    Async wrapper around the google-generativeai SDK.

    One model handle is kept per system instruction, since the ranking
    and understanding providers each pin their own.

    Example:
        >>> client = GeminiClient(GeminiConfig(api_key="..."))
        >>> response = await client.generate(prompt, system_instruction=RANKING_SYSTEM_PROMPT)
        >>> response.text
        '{"rankings": ["42", "7"], "reasoning": "..."}'
    """

    def __init__(self, config: GeminiConfig | None = None) -> None:
        self.config = config or GeminiConfig()

        if self.config.api_key:
            genai.configure(api_key=self.config.api_key)

        self._calls: deque[float] = deque()
        self._budget_lock = asyncio.Lock()
        self._models: dict[str | None, genai.GenerativeModel] = {}

        logger.info(
            "GeminiClient initialized: model=%s, auth=%s, json_output=%s",
            self.config.model,
            "api_key" if self.config.api_key else "adc",
            self.config.json_output,
        )

    def _get_model(self, system_instruction: str | None = None) -> genai.GenerativeModel:
        model = self._models.get(system_instruction)
        if model is None:
            generation_config = {
                "temperature": self.config.temperature,
                "max_output_tokens": self.config.max_output_tokens,
            }
            if self.config.json_output:
                generation_config["response_mime_type"] = "application/json"
            model = genai.GenerativeModel(
                model_name=self.config.model,
                generation_config=generation_config,
                system_instruction=system_instruction,
            )
            self._models[system_instruction] = model
        return model

    async def _reserve_call(self) -> None:
        """Record one call against the rolling 60s budget, or raise."""
        async with self._budget_lock:
            now = time.monotonic()
            while self._calls and now - self._calls[0] >= 60:
                self._calls.popleft()

            if len(self._calls) >= self.config.rate_limit_rpm:
                retry_in = 60 - (now - self._calls[0])
                raise RateLimitError(
                    f"{self.config.model} budget of {self.config.rate_limit_rpm} rpm spent, "
                    f"next slot in {retry_in:.1f}s"
                )
            self._calls.append(now)

    @retry(
        retry=retry_if_exception_type((GeminiAPIError, ConnectionError)),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    )
    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> GeminiResponse:
        """
        Generate a completion.

        Raises:
            RateLimitError: Budget exhausted locally or by the API
            GeminiRequestError: Request rejected, or the reply was blocked or empty
            GeminiAPIError: Transient failure after one retry
        """
        await self._reserve_call()
        model = self._get_model(system_instruction)
        started = time.perf_counter()

        try:
            response = await asyncio.to_thread(
                model.generate_content,
                prompt,
                request_options={"timeout": self.config.timeout_seconds},
            )
        except google_exceptions.ResourceExhausted as e:
            raise RateLimitError(f"Gemini quota exhausted: {e}") from e
        except _REJECTED as e:
            raise GeminiRequestError(f"Gemini rejected the request: {e}") from e
        except Exception as e:
            if "429" in str(e):
                raise RateLimitError(f"Gemini quota exhausted: {e}") from e
            raise GeminiAPIError(f"Gemini API error: {e}") from e

        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when every candidate was blocked
            raise GeminiRequestError(f"Gemini returned no text: {e}") from e
        if not text:
            raise GeminiRequestError("Gemini returned an empty reply")

        usage = getattr(response, "usage_metadata", None)
        total_tokens = getattr(usage, "total_token_count", 0) if usage else 0

        logger.debug(
            "Gemini %s: %d tokens in %.0fms",
            self.config.model,
            total_tokens,
            (time.perf_counter() - started) * 1000,
        )
        return GeminiResponse(text=text, model=self.config.model, total_tokens=total_tokens)
