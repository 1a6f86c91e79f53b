"""
LLM Ranker - Provider chain ranking with tolerant JSON response parsing.
"""

from __future__ import annotations

import json
import logging
import re
from typing import TYPE_CHECKING

from xpertsearch.domains.search.models import Candidate, FilterSet, RankingOutcome

from .prompts import build_ranking_prompt

if TYPE_CHECKING:
    from .contracts import RankingProvider

logger = logging.getLogger(__name__)

__all__ = ["parse_llm_ranking", "rank_with_llm"]

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def parse_llm_ranking(
    text: str,
    candidates: list[Candidate],
) -> tuple[list[Candidate], str | None] | None:
    """
    Parse a model response into a total ordering of ``candidates``.

    Extracts the brace-delimited JSON block, requires a ``rankings`` list,
    maps ids back to candidates (compared as strings) and appends any
    candidate the model left out.

    Returns:
        (ordered candidates, reasoning), or None if the text is unusable
    """
    match = _JSON_BLOCK.search(text or "")
    if not match:
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug("LLM ranking is not valid JSON: %s", e)
        return None

    if not isinstance(parsed, dict):
        return None
    rankings = parsed.get("rankings")
    if not isinstance(rankings, list):
        return None

    by_id: dict[str, list[Candidate]] = {}
    for candidate in candidates:
        by_id.setdefault(candidate.id, []).append(candidate)

    ordered: list[Candidate] = []
    placed: set[str] = set()

    for product_id in rankings:
        # A repeated id takes the next candidate sharing it
        for candidate in by_id.get(str(product_id), []):
            if candidate.identity not in placed:
                ordered.append(candidate)
                placed.add(candidate.identity)
                break

    ordered.extend(c for c in candidates if c.identity not in placed)

    reasoning = parsed.get("reasoning")
    return ordered, reasoning if isinstance(reasoning, str) else None


async def rank_with_llm(
    providers: list[RankingProvider],
    query: str,
    intent: str,
    filters: FilterSet,
    candidates: list[Candidate],
) -> RankingOutcome | None:
    """
    Try each provider in order until one returns a parseable ranking.

    Returns:
        RankingOutcome naming the provider's model, or None if all failed
    """
    prompt = build_ranking_prompt(query, intent, filters, candidates)

    for provider in providers:
        try:
            text = await provider.complete(prompt)
        except Exception as e:
            logger.warning("%s ranking failed: %s", provider.model, e)
            continue

        parsed = parse_llm_ranking(text, candidates)
        if parsed is None:
            logger.warning("%s returned an unparseable ranking", provider.model)
            continue

        ordered, reasoning = parsed
        return RankingOutcome(
            ranked_products=ordered,
            reasoning=reasoning,
            model_used=provider.model,
        )

    return None
