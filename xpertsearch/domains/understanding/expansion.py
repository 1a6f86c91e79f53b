"""
Query Expansion - Synonym and color-variant terms for broader recall.
"""

from __future__ import annotations

from collections.abc import Mapping

__all__ = ["SYNONYMS", "expand_query_terms"]

SYNONYMS: dict[str, tuple[str, ...]] = {
    # Categories
    "dress": ("gown", "frock"),
    "shirt": ("top", "blouse", "tee"),
    "pants": ("trousers", "slacks", "bottoms"),
    "jacket": ("coat", "blazer", "outerwear"),
    "shoes": ("footwear", "sneakers", "boots"),
    "bag": ("purse", "handbag", "backpack", "tote"),
    "jewelry": ("jewellery", "necklace", "bracelet"),
    "watch": ("timepiece",),
    "laptop": ("notebook", "computer"),
    "phone": ("mobile", "smartphone"),
    "headphones": ("earphones", "earbuds", "headset"),
    # Colors
    "red": ("crimson", "scarlet", "burgundy"),
    "blue": ("navy", "azure", "cobalt"),
    "green": ("emerald", "olive", "mint"),
    "gray": ("grey", "charcoal", "slate"),
    "black": ("ebony", "onyx"),
    "white": ("ivory", "cream"),
}


def expand_query_terms(
    query: str,
    max_terms: int = 5,
    synonyms: Mapping[str, tuple[str, ...]] = SYNONYMS,
) -> list[str]:
    """
    Related terms for the words in ``query``.

    Terms already in the query are skipped, duplicates are dropped, and
    at most ``max_terms`` are returned in query-word order.

    Example:
        >>> expand_query_terms("red dress", max_terms=3)
        ['crimson', 'scarlet', 'burgundy']
    """
    if max_terms <= 0:
        return []

    words = query.lower().split()
    seen = set(words)
    extra: list[str] = []

    for word in words:
        for term in synonyms.get(word, ()):
            if term not in seen:
                seen.add(term)
                extra.append(term)
                if len(extra) == max_terms:
                    return extra
    return extra
