"""
Spell Correction - Dictionary-based typo repair for shopper queries.

Each token is checked against a table of known typos first, then snapped
to the nearest storefront vocabulary word by Levenshtein distance.
Tokens with digits or symbols (sizes, prices, SKUs) are never touched.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

logger = logging.getLogger(__name__)

__all__ = ["SpellCorrector", "COMMON_CORRECTIONS", "STOREFRONT_VOCABULARY"]

STOREFRONT_VOCABULARY: tuple[str, ...] = (
    # Categories
    "dress", "dresses", "shirt", "shirts", "shoes", "pants", "jacket", "jackets",
    "sweater", "sweaters", "jeans", "coat", "coats", "bag", "bags", "watch", "watches",
    "jewelry", "accessories", "hat", "hats", "scarf", "scarves", "gloves", "socks",
    "underwear", "swimsuit", "swimwear", "bikini", "shorts", "skirt", "skirts",
    "blouse", "blazer", "suit", "suits", "tie", "ties", "belt", "belts",
    # Colors
    "red", "blue", "green", "yellow", "black", "white", "gray", "grey", "pink",
    "purple", "orange", "brown", "beige", "navy", "gold", "silver", "rose",
    # Materials
    "cotton", "silk", "wool", "leather", "denim", "polyester", "nylon", "linen",
    "cashmere", "velvet", "suede", "satin", "chiffon", "lace", "mesh",
    # Fit
    "small", "medium", "large", "extra", "plus", "petite", "tall", "regular",
    "slim", "fit", "loose", "tight", "oversized",
    # Occasions and seasons
    "casual", "formal", "business", "party", "wedding", "evening", "cocktail",
    "work", "office", "gym", "sports", "athletic", "outdoor", "beach", "summer",
    "winter", "spring", "fall", "autumn",
    # Brands
    "nike", "adidas", "puma", "reebok", "levis", "gap", "zara", "uniqlo",
    # Audience
    "womens", "women", "mens", "men", "kids", "children", "baby", "babies",
)

COMMON_CORRECTIONS: dict[str, str] = {
    "drss": "dress",
    "shrt": "shirt",
    "pnts": "pants",
    "jckt": "jacket",
    "swetr": "sweater",
    "jwlry": "jewelry",
    "accsories": "accessories",
    "blak": "black",
    "blu": "blue",
    "grn": "green",
    "gry": "gray",
    "wht": "white",
    "sm": "small",
    "md": "medium",
    "lg": "large",
    "xl": "extra large",
    "xxl": "extra extra large",
}

_WORD = re.compile(r"^[a-z]+$")


class SpellCorrector:
    """
    Snap misspelled query words to a known vocabulary.

    Words shorter than ``min_length`` are only rewritten through the
    corrections table. Words up to five letters tolerate one edit, longer
    words two.

    Example:
        >>> SpellCorrector().correct("blak leathr jackt")
        'black leather jacket'
    """

    def __init__(
        self,
        vocabulary: Iterable[str] = STOREFRONT_VOCABULARY,
        corrections: Mapping[str, str] | None = None,
        min_length: int = 4,
    ) -> None:
        self._vocabulary = tuple(dict.fromkeys(w.lower() for w in vocabulary))
        self._known = frozenset(self._vocabulary)
        self._corrections = dict(COMMON_CORRECTIONS if corrections is None else corrections)
        self._min_length = min_length

    def correct_word(self, word: str) -> str:
        lowered = word.lower()
        if lowered in self._corrections:
            return self._corrections[lowered]
        if lowered in self._known or len(lowered) < self._min_length or not _WORD.match(lowered):
            return word

        max_edits = 1 if len(lowered) <= 5 else 2
        match = process.extractOne(
            lowered,
            self._vocabulary,
            scorer=Levenshtein.distance,
            score_cutoff=max_edits,
        )
        return match[0] if match else word

    def correct(self, text: str) -> str:
        """Correct every word. Returns ``text`` unchanged if nothing was fixed."""
        words = text.split()
        corrected = [self.correct_word(w) for w in words]
        if corrected == words:
            return text

        result = " ".join(corrected)
        logger.debug("Spell corrected '%s' -> '%s'", text[:50], result[:50])
        return result
