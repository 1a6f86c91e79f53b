"""
Understanding Domain - Query spelling, expansion and natural-language parsing.
"""

from .contracts import QueryUnderstanding
from .expansion import expand_query_terms
from .models import ParsedQuery, QueryIntent
from .parser import LLMQueryParser
from .spelling import SpellCorrector

__all__ = [
    "QueryUnderstanding",
    "ParsedQuery",
    "QueryIntent",
    "LLMQueryParser",
    "SpellCorrector",
    "expand_query_terms",
]
