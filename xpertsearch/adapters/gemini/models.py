"""
Gemini Models - Client configuration and completion result.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GeminiConfig(BaseModel):
    """Configuration for Gemini client."""

    model: str = Field(default="gemini-1.5-flash")
    api_key: str | None = None
    temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=1500, gt=0)
    timeout_seconds: int = Field(default=30)
    rate_limit_rpm: int = Field(default=60, gt=0)
    json_output: bool = True

    model_config = {"frozen": True}


class GeminiResponse(BaseModel):
    """Completion text and the tokens it cost."""

    text: str
    model: str
    total_tokens: int = 0
