"""Result types returned by the QueryService."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rng_monitor.sampling.types import Sample
    from rng_monitor.store.types import DailyRollup


@dataclass(frozen=True, slots=True)
class HistoryPage:
    """A page of history with the pagination that produced it.

    Attributes:
        items: Samples, newest ``observed_at`` first.
        total: Matching rows before pagination.
        limit: Effective page size after defaulting.
        offset: Effective offset after defaulting.
    """

    items: list[Sample]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True, slots=True)
class SummaryStats:
    """Whole-history summary.

    Attributes:
        total_generations: Number of stored samples.
        total_anomalies: Number of samples flagged as anomalies.
        anomaly_rate: ``100 * total_anomalies / total_generations``, or 0.
        avg_entropy: Mean entropy, ``None`` without data.
        min_entropy: Minimum entropy, ``None`` without data.
        max_entropy: Maximum entropy, ``None`` without data.
        avg_chi_squared: Mean chi-squared, ``None`` without data.
        min_chi_squared: Minimum chi-squared, ``None`` without data.
        max_chi_squared: Maximum chi-squared, ``None`` without data.
    """

    total_generations: int
    total_anomalies: int
    anomaly_rate: float
    avg_entropy: float | None = None
    min_entropy: float | None = None
    max_entropy: float | None = None
    avg_chi_squared: float | None = None
    min_chi_squared: float | None = None
    max_chi_squared: float | None = None


@dataclass(frozen=True, slots=True)
class ChartData:
    """Chart-ready aggregates: per-day rollups plus anomaly points."""

    daily: list[DailyRollup] = field(default_factory=list)
    anomalies: list[Sample] = field(default_factory=list)
