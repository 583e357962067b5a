"""Read-side query layer over the record store."""

from rng_monitor.query.service import DEFAULT_HISTORY_LIMIT, QueryService
from rng_monitor.query.types import ChartData, HistoryPage, SummaryStats

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "ChartData",
    "HistoryPage",
    "QueryService",
    "SummaryStats",
]
