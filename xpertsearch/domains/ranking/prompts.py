"""
Ranking Prompts - Prompt construction for LLM relevance ranking.
"""

from __future__ import annotations

import json

from xpertsearch.domains.search.models import Candidate, FilterSet

__all__ = ["RANKING_PROMPT", "RANKING_SYSTEM_PROMPT", "build_ranking_prompt", "describe_candidate"]

RANKING_SYSTEM_PROMPT = (
    "You are an expert e-commerce product relevance judge. Always respond with valid JSON only."
)

RANKING_PROMPT = """You are an expert e-commerce product relevance judge. Your job is to rank products based on how well they match a user's search query and intent.

You will be given:
1. A user's search query
2. The parsed intent and filters
3. A list of product candidates with their details

Rank these products from most relevant to least relevant, considering:
- Semantic relevance to the query
- Match with explicit filters (price, category, brand)
- Product availability (prioritize available products)
- User intent (product search vs recommendation vs comparison)

Return a JSON object with this structure:
{
  "rankings": ["product_id_1", "product_id_2", "product_id_3"],
  "reasoning": "Brief explanation of ranking decisions"
}

Use the exact ID values given for each candidate."""

DESCRIPTION_SNIPPET = 200


def _price_text(candidate: Candidate) -> str:
    if not candidate.price_min:
        return "N/A"
    text = f"${candidate.price_min:g}"
    if candidate.price_max and candidate.price_max != candidate.price_min:
        text += f" - ${candidate.price_max:g}"
    return text


def describe_candidate(index: int, candidate: Candidate) -> str:
    description = (candidate.description or "")[:DESCRIPTION_SNIPPET] or "N/A"
    tags = ", ".join(candidate.tags) or "N/A"
    return (
        f"{index}. ID: {candidate.id}\n"
        f"    Title: {candidate.title}\n"
        f"    Description: {description}\n"
        f"    Price: {_price_text(candidate)}\n"
        f"    Brand: {candidate.vendor or 'N/A'}\n"
        f"    Type: {candidate.product_type or 'N/A'}\n"
        f"    Tags: {tags}\n"
        f"    Available: {str(candidate.available).lower()}\n"
        f"    Similarity: {candidate.similarity_score:.3f}"
    )


def build_ranking_prompt(
    query: str,
    intent: str,
    filters: FilterSet,
    candidates: list[Candidate],
) -> str:
    """Build the full ranking prompt for a candidate list."""
    listing = "\n\n".join(describe_candidate(i, c) for i, c in enumerate(candidates, 1))
    return (
        f"{RANKING_PROMPT}\n\n"
        f'Query: "{query}"\n'
        f"Intent: {intent}\n"
        f"Filters: {json.dumps(filters.cache_payload())}\n\n"
        f"Product candidates:\n{listing}\n\n"
        "Rank these products and provide your reasoning:"
    )
