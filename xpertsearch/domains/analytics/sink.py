"""
Logging Analytics Sink - Structured log line per served search.
"""

from __future__ import annotations

import json
import logging

from .models import SearchEvent

__all__ = ["LoggingAnalyticsSink"]


class LoggingAnalyticsSink:
    """Writes search events to the ``xpertsearch.analytics`` logger."""

    def __init__(self, logger_name: str = "xpertsearch.analytics") -> None:
        self._logger = logging.getLogger(logger_name)

    async def log_search(self, event: SearchEvent) -> None:
        self._logger.info(
            "search shop=%s method=%s results=%d latency_ms=%d search_id=%s query=%s filters=%s",
            event.shop_id,
            event.search_method,
            event.results_count,
            event.processing_time_ms,
            event.search_id,
            json.dumps(event.query),
            json.dumps(event.filters, sort_keys=True),
        )
