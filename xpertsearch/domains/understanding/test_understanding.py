"""
Tests for query spelling, expansion and LLM query parsing.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

from .expansion import expand_query_terms
from .models import ParsedQuery, QueryIntent
from .parser import LLMQueryParser
from .spelling import SpellCorrector


def _provider(model: str, reply: str | Exception) -> AsyncMock:
    provider = AsyncMock()
    provider.model = model
    if isinstance(reply, Exception):
        provider.complete.side_effect = reply
    else:
        provider.complete.return_value = reply
    return provider


async def test_parse_extracts_filters_and_drops_unknown_keys() -> None:
    """Test filters are validated and unknown keys ignored."""
    reply = (
        'Here you go: {"query_text": "red evening dress formal", '
        '"filters": {"price_max": 100, "color": "red", "product_type": "dress"}, '
        '"intent": "product_search", "confidence": 0.9}'
    )
    parsed = await LLMQueryParser([_provider("gemini-1.5-flash", reply)]).parse("red dress under $100")

    assert parsed.query_text == "red evening dress formal"
    assert parsed.filters.price_max == 100
    assert parsed.filters.product_type == "dress"
    assert "color" not in parsed.filters.cache_payload()
    assert parsed.confidence == 0.9


async def test_parse_falls_back_to_secondary() -> None:
    """Test the secondary provider is tried after a primary error."""
    primary = _provider("gemini-1.5-flash", RuntimeError("quota"))
    secondary = _provider(
        "gpt-3.5-turbo",
        '{"query_text": "gift ideas", "filters": {}, "intent": "recommendation", "confidence": 0.7}',
    )

    parsed = await LLMQueryParser([primary, secondary]).parse("gift ideas")

    assert parsed.intent == QueryIntent.RECOMMENDATION


async def test_parse_failure_returns_default() -> None:
    """Test unusable answers give the raw-query default parse."""
    parsed = await LLMQueryParser([_provider("gemini-1.5-flash", "no idea")]).parse("lamp")

    assert parsed == ParsedQuery.fallback("lamp")
    assert parsed.intent == QueryIntent.PRODUCT_SEARCH
    assert parsed.confidence == 0.3
    assert parsed.filters.is_empty


async def test_parse_rejects_invalid_intent() -> None:
    """Test an out-of-vocabulary intent is treated as a failed parse."""
    reply = '{"query_text": "lamp", "filters": {}, "intent": "shopping", "confidence": 0.5}'
    parsed = await LLMQueryParser([_provider("gemini-1.5-flash", reply)]).parse("lamp")
    assert parsed.confidence == 0.3


# --- Spelling Tests ---


def test_spell_corrector_fixes_typos() -> None:
    """Test table lookups and nearest-word matches are both applied."""
    assert SpellCorrector().correct("blak leathr jackt") == "black leather jacket"


def test_spell_corrector_leaves_safe_tokens_alone() -> None:
    """Test known words, short words, sizes and prices pass through unchanged."""
    text = "Red mug 2xl $50 lampshade"
    assert SpellCorrector().correct(text) is text


def test_spell_corrector_custom_vocabulary() -> None:
    """Test a shop vocabulary can replace the built-in one."""
    corrector = SpellCorrector(vocabulary=["Lampshade"], corrections={})
    assert corrector.correct("brass lampshde") == "brass lampshade"


# --- Expansion Tests ---


def test_expand_query_terms_skips_present_terms() -> None:
    """Test synonyms already in the query are skipped and the cap is honoured."""
    terms = expand_query_terms("blue navy jacket", max_terms=5)
    assert terms == ["azure", "cobalt", "coat", "blazer", "outerwear"]


def test_expand_query_terms_disabled() -> None:
    """Test a zero cap disables expansion."""
    assert expand_query_terms("red dress", max_terms=0) == []
    assert expand_query_terms("lamp") == []
