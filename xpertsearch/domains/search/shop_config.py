"""
Shop Config - Per-shop search configuration providers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import SearchConfig

if TYPE_CHECKING:
    from xpertsearch.config.settings import Settings

__all__ = ["SettingsConfigProvider", "StaticConfigProvider"]


class StaticConfigProvider:
    """Same configuration for every shop."""

    def __init__(self, config: SearchConfig | None = None) -> None:
        self._config = config or SearchConfig()

    async def get_config(self, shop_id: str) -> SearchConfig:
        return self._config


class SettingsConfigProvider:
    """Configuration derived from application settings."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def get_config(self, shop_id: str) -> SearchConfig:
        return self._settings.search_config(shop_id)
