"""
OpenAI Models - Request/Response types for the chat completions API.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class OpenAIConfig(BaseModel):
    """Configuration for the OpenAI client."""

    api_key: str
    model: str = Field(default="gpt-3.5-turbo")
    base_url: str = Field(default="https://api.openai.com/v1")
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1500, gt=0)
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = {"frozen": True}


class OpenAIResponse(BaseModel):
    """Chat completion result."""

    text: str
    model: str
    total_tokens: int = 0
