"""Result types returned by record store queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rng_monitor.sampling.types import Sample


@dataclass(frozen=True, slots=True)
class Page:
    """One page of samples plus the total number of matching rows.

    Attributes:
        items: Samples on this page, newest ``observed_at`` first.
        total: Rows matching the filter before limit/offset were applied.
    """

    items: list[Sample] = field(default_factory=list)
    total: int = 0


@dataclass(frozen=True, slots=True)
class AggregateStats:
    """Whole-table aggregates.

    Score aggregates ignore rows whose score is missing and are ``None``
    when no scored rows exist.
    """

    count: int = 0
    anomaly_count: int = 0
    avg_entropy: float | None = None
    min_entropy: float | None = None
    max_entropy: float | None = None
    avg_chi_squared: float | None = None
    min_chi_squared: float | None = None
    max_chi_squared: float | None = None


@dataclass(frozen=True, slots=True)
class DailyRollup:
    """Aggregates for one calendar day in the reference time zone."""

    day: date
    count: int
    anomaly_count: int
    avg_entropy: float | None
    avg_chi_squared: float | None
