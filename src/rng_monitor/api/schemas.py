"""Response models for the HTTP API.

Field names are snake_case in Python and camelCase on the wire; every
model is built from the corresponding core dataclass via ``from_*``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from rng_monitor.query.types import ChartData, HistoryPage, SummaryStats
    from rng_monitor.sampling.types import Sample
    from rng_monitor.store.types import DailyRollup


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SampleOut(_CamelModel):
    """One stored sample."""

    id: int | None
    value: str
    observed_at: datetime
    entropy: float | None
    chi_squared: float | None
    is_anomaly: bool
    created_at: datetime | None

    @classmethod
    def from_sample(cls, sample: Sample) -> SampleOut:
        return cls(
            id=sample.id,
            value=sample.value,
            observed_at=sample.observed_at,
            entropy=sample.entropy,
            chi_squared=sample.chi_squared,
            is_anomaly=sample.is_anomaly,
            created_at=sample.created_at,
        )


class HistoryOut(_CamelModel):
    """Paginated history."""

    items: list[SampleOut]
    total: int
    limit: int
    offset: int

    @classmethod
    def from_page(cls, page: HistoryPage) -> HistoryOut:
        return cls(
            items=[SampleOut.from_sample(s) for s in page.items],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )


class StatsOut(_CamelModel):
    """Summary statistics."""

    total_generations: int
    total_anomalies: int
    anomaly_rate: float
    avg_entropy: float | None
    min_entropy: float | None
    max_entropy: float | None
    avg_chi_squared: float | None
    min_chi_squared: float | None
    max_chi_squared: float | None

    @classmethod
    def from_stats(cls, stats: SummaryStats) -> StatsOut:
        return cls(
            total_generations=stats.total_generations,
            total_anomalies=stats.total_anomalies,
            anomaly_rate=stats.anomaly_rate,
            avg_entropy=stats.avg_entropy,
            min_entropy=stats.min_entropy,
            max_entropy=stats.max_entropy,
            avg_chi_squared=stats.avg_chi_squared,
            min_chi_squared=stats.min_chi_squared,
            max_chi_squared=stats.max_chi_squared,
        )


class DailyOut(_CamelModel):
    """Aggregates for one calendar day."""

    day: date = Field(alias="date")
    count: int
    anomaly_count: int
    avg_entropy: float | None
    avg_chi_squared: float | None

    @classmethod
    def from_rollup(cls, rollup: DailyRollup) -> DailyOut:
        return cls(
            day=rollup.day,
            count=rollup.count,
            anomaly_count=rollup.anomaly_count,
            avg_entropy=rollup.avg_entropy,
            avg_chi_squared=rollup.avg_chi_squared,
        )


class ChartOut(_CamelModel):
    """Chart-ready aggregates."""

    daily: list[DailyOut]
    anomalies: list[SampleOut]

    @classmethod
    def from_chart(cls, chart: ChartData) -> ChartOut:
        return cls(
            daily=[DailyOut.from_rollup(d) for d in chart.daily],
            anomalies=[SampleOut.from_sample(s) for s in chart.anomalies],
        )


class HealthOut(_CamelModel):
    """Liveness and component status."""

    status: str
    timestamp: str
    scheduler: dict[str, Any]
    entropy_source: dict[str, Any]
    store: dict[str, Any]


class ErrorOut(BaseModel):
    """Error body returned with HTTP 500."""

    error: str
