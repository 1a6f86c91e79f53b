"""
LLM Query Parser - Extracts search text, filters and intent with an LLM.

Features:
- Provider chain (primary, then secondary)
- JSON block extraction and pydantic validation
- Unknown filter keys (color, size, ...) are dropped
- Any failure yields the raw-query fallback parse
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .models import ParsedQuery

if TYPE_CHECKING:
    from xpertsearch.domains.ranking.contracts import RankingProvider

logger = logging.getLogger(__name__)

__all__ = ["LLMQueryParser", "QUERY_UNDERSTANDING_PROMPT", "UNDERSTANDING_SYSTEM_PROMPT"]

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

UNDERSTANDING_SYSTEM_PROMPT = (
    "You are an expert e-commerce search query analyzer. Always respond with valid JSON only."
)

QUERY_UNDERSTANDING_PROMPT = """You are an expert e-commerce search query analyzer. Analyze the shopper's search query and extract structured information that will help find the most relevant products.

Return a JSON object with this structure:
{
  "query_text": "refined search query optimized for semantic search",
  "filters": {
    "price_min": optional_number,
    "price_max": optional_number,
    "product_type": "optional_category",
    "vendor": "optional_brand",
    "tags": ["optional", "relevant", "tags"],
    "available": optional_boolean
  },
  "intent": "product_search|question|comparison|recommendation",
  "confidence": 0.0_to_1.0
}

Guidelines:
1. Extract explicit and implicit filters (price ranges, categories, brands)
2. Refine query_text for semantic search (expand synonyms, add context)
3. Set confidence based on how clear and specific the query is
4. For ambiguous queries, prefer broader matching over strict filtering

Example:
Input: "red evening dress under $100 for wedding"
Output: {"query_text": "red evening dress formal wedding attire", "filters": {"price_max": 100, "product_type": "dress", "tags": ["evening", "formal", "wedding"]}, "intent": "product_search", "confidence": 0.9}

Now analyze this query:
"""


class LLMQueryParser:
    """
    Query understanding backed by the configured LLM providers.

    Example:
        >>> parser = LLMQueryParser([gemini_provider, openai_provider])
        >>> parsed = await parser.parse("cheap running shoes")
        >>> parsed.filters.product_type
        'shoes'
    """

    def __init__(self, providers: list[RankingProvider]) -> None:
        self._providers = list(providers)

    async def parse(self, text: str) -> ParsedQuery:
        """Parse shopper text, falling back to the raw query on any failure."""
        if not text or not text.strip():
            return ParsedQuery.fallback(text)

        prompt = f'{QUERY_UNDERSTANDING_PROMPT}"{text}"'

        for provider in self._providers:
            try:
                response = await provider.complete(prompt)
            except Exception as e:
                logger.warning("%s query parsing failed: %s", provider.model, e)
                continue

            parsed = self._parse_response(response)
            if parsed is not None:
                logger.info(
                    "Parsed query '%s' -> '%s' (intent=%s, confidence=%.2f)",
                    text[:50],
                    parsed.query_text[:50],
                    parsed.intent.value,
                    parsed.confidence,
                )
                return parsed

            logger.warning("%s returned an unparseable query analysis", provider.model)

        return ParsedQuery.fallback(text)

    @staticmethod
    def _parse_response(response: str) -> ParsedQuery | None:
        match = _JSON_BLOCK.search(response or "")
        if not match:
            return None
        try:
            data = json.loads(match.group(0))
            return ParsedQuery.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.debug("Query analysis rejected: %s", e)
            return None
