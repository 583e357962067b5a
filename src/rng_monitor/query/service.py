"""Query service answering the read-side questions of the monitor.

Every operation is read-only and delegates the heavy lifting to one typed
record store operation; this layer owns request normalisation (pagination
defaults, time zone) and derived figures such as the anomaly rate.
"""

from __future__ import annotations

import logging
import re
from datetime import timezone
from typing import TYPE_CHECKING

from rng_monitor.query.types import ChartData, HistoryPage, SummaryStats

if TYPE_CHECKING:
    from datetime import tzinfo

    from rng_monitor.sampling.types import Sample
    from rng_monitor.store.base import RecordStore

logger = logging.getLogger("rng_monitor")

DEFAULT_HISTORY_LIMIT = 100

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_leading_int(value: int | str | None) -> int | None:
    """Integer prefix of a query-string value, or ``None`` if there is none.

    ``"10.7"`` and ``"10abc"`` read as 10; ``""``, ``"abc"`` and ``None``
    read as ``None``.
    """
    if value is None or isinstance(value, int):
        return value
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def normalize_pagination(
    limit: int | str | None,
    offset: int | str | None,
) -> tuple[int, int]:
    """Apply history defaults.

    Both values go through :func:`parse_leading_int` first. A missing,
    unparseable or non-positive *limit* becomes ``DEFAULT_HISTORY_LIMIT``;
    a missing, unparseable or negative *offset* becomes 0.
    """
    parsed_limit = parse_leading_int(limit)
    parsed_offset = parse_leading_int(offset)
    if parsed_limit is None or parsed_limit <= 0:
        parsed_limit = DEFAULT_HISTORY_LIMIT
    if parsed_offset is None or parsed_offset < 0:
        parsed_offset = 0
    return parsed_limit, parsed_offset


def anomaly_rate(total: int, anomalies: int) -> float:
    """Anomalies as a percentage of *total*; 0 for an empty history."""
    if total <= 0:
        return 0.0
    return anomalies / total * 100.0


class QueryService:
    """Read-only facade over a :class:`RecordStore`.

    Args:
        store: The record store to read from.
        tz: Reference time zone for grouping samples by calendar day.
    """

    def __init__(self, store: RecordStore, tz: tzinfo | None = None) -> None:
        self._store = store
        self._tz = tz or timezone.utc

    @property
    def reference_tz(self) -> tzinfo:
        """Reference time zone used by :meth:`chart_data`."""
        return self._tz

    def latest(self) -> Sample | None:
        """Most recently scheduled sample, or ``None`` for an empty store."""
        return self._store.find_latest_by_observed_at()

    def history(
        self,
        limit: int | str | None = None,
        offset: int | str | None = None,
        anomaly_only: bool = False,
    ) -> HistoryPage:
        """Paginated history, newest first.

        Args:
            limit: Page size; defaults to 100 when missing, unparseable or
                non-positive.
            offset: Rows to skip; defaults to 0 when missing, unparseable or
                negative.
            anomaly_only: Restrict both items and total to anomalies.

        Returns:
            The page, the filtered total, and the effective pagination.
        """
        limit, offset = normalize_pagination(limit, offset)
        page = self._store.find_page(limit=limit, offset=offset, anomaly_only=anomaly_only)
        return HistoryPage(items=list(page.items), total=page.total, limit=limit, offset=offset)

    def summary_stats(self) -> SummaryStats:
        """Totals, anomaly rate, and score extremes across all samples."""
        agg = self._store.aggregate()
        return SummaryStats(
            total_generations=agg.count,
            total_anomalies=agg.anomaly_count,
            anomaly_rate=anomaly_rate(agg.count, agg.anomaly_count),
            avg_entropy=agg.avg_entropy,
            min_entropy=agg.min_entropy,
            max_entropy=agg.max_entropy,
            avg_chi_squared=agg.avg_chi_squared,
            min_chi_squared=agg.min_chi_squared,
            max_chi_squared=agg.max_chi_squared,
        )

    def chart_data(self) -> ChartData:
        """Per-day rollups in the reference zone plus every anomaly, oldest first."""
        daily = sorted(self._store.aggregate_by_day(self._tz), key=lambda d: d.day)
        anomalies = sorted(
            self._store.find_anomalies(),
            key=lambda s: (s.observed_at, s.id or 0),
        )
        logger.debug("Chart data: %d days, %d anomalies", len(daily), len(anomalies))
        return ChartData(daily=daily, anomalies=anomalies)
