"""
Gemini Adapter - Google Gemini API client.

Primary model for candidate ranking and query understanding.
"""

from .client import GeminiAPIError, GeminiClient, GeminiError, GeminiRequestError, RateLimitError
from .models import GeminiConfig, GeminiResponse

__all__ = [
    "GeminiClient",
    "GeminiConfig",
    "GeminiResponse",
    "GeminiError",
    "GeminiAPIError",
    "GeminiRequestError",
    "RateLimitError",
]
