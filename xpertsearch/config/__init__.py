"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    CacheError,
    ErrorCode,
    LLMError,
    RankingError,
    RetrievalError,
    SearchError,
    StorageError,
    StrategyError,
    XpertSearchError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "XpertSearchError",
    "SearchError",
    "RetrievalError",
    "RankingError",
    "CacheError",
    "StrategyError",
    "LLMError",
    "StorageError",
]
