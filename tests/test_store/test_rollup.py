"""Tests for the in-memory aggregation helpers."""

from __future__ import annotations

from datetime import date, timezone
from zoneinfo import ZoneInfo

import pytest

from rng_monitor.store.rollup import aggregate_samples, rollup_by_day, rollup_scores_by_day


class TestAggregateSamples:
    """Tests for aggregate_samples()."""

    def test_empty(self) -> None:
        stats = aggregate_samples([])
        assert stats.count == 0
        assert stats.avg_entropy is None
        assert stats.max_chi_squared is None

    def test_accepts_generator(self, make_sample) -> None:
        stats = aggregate_samples(make_sample(minutes=i) for i in range(4))
        assert stats.count == 4
        assert stats.avg_chi_squared == pytest.approx(8.0)


class TestRollupByDay:
    """Tests for rollup_by_day()."""

    def test_unsorted_input_sorted_output(self, make_sample) -> None:
        samples = [make_sample(minutes=m) for m in (2 * 1440, 0, 1440)]
        days = [d.day for d in rollup_by_day(samples, timezone.utc)]
        assert days == [date(2026, 10, 18), date(2026, 10, 19), date(2026, 10, 20)]

    def test_days_without_samples_are_absent(self, make_sample) -> None:
        samples = [make_sample(minutes=0), make_sample(minutes=3 * 1440)]
        assert len(rollup_by_day(samples, timezone.utc)) == 2


class TestRollupScoresByDay:
    """Tests for the column-level rollup used by the SQLite backend."""

    def test_matches_sample_rollup(self, make_sample) -> None:
        samples = [
            make_sample(minutes=m, anomaly=(m % 3 == 0))
            for m in range(-120, 3 * 1440, 97)
        ]
        rows = [(s.observed_at, s.is_anomaly, s.entropy, s.chi_squared) for s in samples]
        berlin = ZoneInfo("Europe/Berlin")
        assert rollup_scores_by_day(rows, berlin) == rollup_by_day(samples, berlin)

    def test_null_scores_skipped_but_counted(self, t0) -> None:
        rows = [(t0, False, None, None), (t0, True, 2.0, 40.0)]
        (day,) = rollup_scores_by_day(rows, timezone.utc)
        assert day.count == 2
        assert day.anomaly_count == 1
        assert day.avg_entropy == 2.0
        assert day.avg_chi_squared == 40.0
