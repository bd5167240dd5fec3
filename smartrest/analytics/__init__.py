"""Analytics package."""

from .baseline import HistoricalBaseline
from .reporter import AnalyticsReporter, AnalyticsSink, RestRecord, SqlAnalyticsSink
from .summary import Insight, RestSummary, insights, load_records, summarize

__all__ = [
    "HistoricalBaseline",
    "AnalyticsReporter",
    "AnalyticsSink",
    "RestRecord",
    "SqlAnalyticsSink",
    "Insight",
    "RestSummary",
    "insights",
    "load_records",
    "summarize",
]
