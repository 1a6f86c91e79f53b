"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Paths
    db_path: Path = Path("data/xpertsearch.db")
    faiss_index_path: Path = Path("data/indices/faiss")

    # Gemini (primary ranking / query understanding model)
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    gemini_temperature: float = 0.1
    gemini_rate_limit_rpm: int = 60

    # OpenAI (secondary provider)
    openai_api_key: str | None = None
    openai_model: str = "gpt-3.5-turbo"
    openai_base_url: str = "https://api.openai.com/v1"
    openai_timeout_seconds: float = 30.0

    # Embeddings
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = 384

    # Search strategy
    search_strategy: str = "ai"
    fallback_strategy: str = "hybrid"
    vector_threshold: float = 0.5
    vector_over_fetch_factor: int = 2
    vector_placeholder_similarity: float = 0.5
    rrf_k: int = 60
    rrf_vector_weight: float = 0.7
    rrf_keyword_weight: float = 0.3
    llm_ranking_max_candidates: int = 10
    search_timeout_ms: int = 5000
    ranking_timeout_seconds: float = 5.0
    facet_superset_limit: int = 200
    spell_correction_enabled: bool = True
    query_expansion_max_terms: int = 3
    enable_analytics: bool = True

    # Cache: "redis", "memory" or "none"
    cache_backend: str = "redis"
    redis_url: str | None = None
    cache_ttl: int = 3600
    cache_max_entries: int = 5000
    best_effort_timeout_seconds: float = 2.0

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    rate_limit_rpm: int = 100
    cors_allow_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def search_config(self, shop_id: str | None = None):
        """Build the search configuration for a shop.

        Every shop currently shares the process-wide settings.
        """
        from xpertsearch.domains.search.models import SearchConfig

        return SearchConfig(
            default_strategy=self.search_strategy,
            fallback_strategy=self.fallback_strategy,
            vector_threshold=self.vector_threshold,
            cache_ttl=self.cache_ttl,
            enable_analytics=self.enable_analytics,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
