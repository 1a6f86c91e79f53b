"""
Analytics Domain - Best-effort search event reporting.
"""

from .contracts import AnalyticsSink
from .models import SearchEvent
from .sink import LoggingAnalyticsSink

__all__ = ["AnalyticsSink", "SearchEvent", "LoggingAnalyticsSink"]
