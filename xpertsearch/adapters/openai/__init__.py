"""
OpenAI Adapter - Chat completions client (secondary LLM).
"""

from .client import OpenAIClient
from .models import OpenAIConfig, OpenAIResponse

__all__ = ["OpenAIClient", "OpenAIConfig", "OpenAIResponse"]
