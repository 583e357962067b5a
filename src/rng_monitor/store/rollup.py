"""Aggregation over in-memory sequences of Samples.

Shared by the in-memory backend for every aggregate and by the SQLite
backend for per-day rollups in zones other than UTC, where the day
boundary depends on IANA rules that SQLite cannot evaluate.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, tzinfo

from rng_monitor.sampling.types import Sample
from rng_monitor.store.types import AggregateStats, DailyRollup


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def aggregate_samples(samples: Iterable[Sample]) -> AggregateStats:
    """Whole-collection aggregates with SQL ``AVG``/``MIN``/``MAX`` semantics.

    Missing scores are skipped by the score aggregates but still counted.
    """
    count = 0
    anomaly_count = 0
    entropies: list[float] = []
    chi_values: list[float] = []
    for sample in samples:
        count += 1
        if sample.is_anomaly:
            anomaly_count += 1
        if sample.entropy is not None:
            entropies.append(sample.entropy)
        if sample.chi_squared is not None:
            chi_values.append(sample.chi_squared)

    return AggregateStats(
        count=count,
        anomaly_count=anomaly_count,
        avg_entropy=_mean(entropies),
        min_entropy=min(entropies) if entropies else None,
        max_entropy=max(entropies) if entropies else None,
        avg_chi_squared=_mean(chi_values),
        min_chi_squared=min(chi_values) if chi_values else None,
        max_chi_squared=max(chi_values) if chi_values else None,
    )


def rollup_by_day(samples: Iterable[Sample], tz: tzinfo) -> list[DailyRollup]:
    """Group samples by the calendar date of ``observed_at`` in *tz*.

    Returns:
        One rollup per day that has at least one sample, oldest first.
    """
    return rollup_scores_by_day(
        ((s.observed_at, s.is_anomaly, s.entropy, s.chi_squared) for s in samples),
        tz,
    )


def rollup_scores_by_day(
    rows: Iterable[tuple[datetime, bool, float | None, float | None]],
    tz: tzinfo,
) -> list[DailyRollup]:
    """Per-day rollup over bare ``(observed_at, is_anomaly, entropy, chi_squared)`` rows.

    Lets a backend stream only the four columns the rollup needs instead of
    materialising whole Samples.
    """
    buckets: dict[date, tuple[int, int, list[float], list[float]]] = {}
    for observed_at, anomalous, entropy, chi_value in rows:
        day = observed_at.astimezone(tz).date()
        count, anomaly_count, entropies, chi_values = buckets.get(day, (0, 0, [], []))
        if entropy is not None:
            entropies.append(entropy)
        if chi_value is not None:
            chi_values.append(chi_value)
        buckets[day] = (count + 1, anomaly_count + int(bool(anomalous)), entropies, chi_values)

    return [
        DailyRollup(
            day=day,
            count=buckets[day][0],
            anomaly_count=buckets[day][1],
            avg_entropy=_mean(buckets[day][2]),
            avg_chi_squared=_mean(buckets[day][3]),
        )
        for day in sorted(buckets)
    ]
