"""
Tests for analytics events and the logging sink.
"""

from __future__ import annotations

import logging

import pytest

from .models import SearchEvent
from .sink import LoggingAnalyticsSink


async def test_logging_sink_writes_event(caplog: pytest.LogCaptureFixture) -> None:
    """Test one structured log line is written per event."""
    event = SearchEvent(
        query="red dress",
        shop_id="shop-1",
        results_count=4,
        search_method="hybrid",
        processing_time_ms=120,
        search_id="hybrid-1700000000000",
        filters={"vendor": "Acme"},
    )

    with caplog.at_level(logging.INFO, logger="xpertsearch.analytics"):
        await LoggingAnalyticsSink().log_search(event)

    assert len(caplog.records) == 1
    message = caplog.records[0].getMessage()
    assert "shop=shop-1" in message
    assert "method=hybrid" in message
    assert '"red dress"' in message
