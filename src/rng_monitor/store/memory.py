"""In-process record store.

Keeps samples in a list guarded by a lock. Nothing survives a restart;
intended for tests, demos and ``--memory`` runs.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

from rng_monitor.sampling.sampler import utc_now
from rng_monitor.store.base import RecordStore
from rng_monitor.store.rollup import aggregate_samples, rollup_by_day
from rng_monitor.store.types import AggregateStats, DailyRollup, Page

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import tzinfo

    from rng_monitor.sampling.types import Sample


def _order_key(sample: Sample) -> tuple[datetime, int]:
    return (sample.observed_at, sample.id or 0)


class InMemoryRecordStore(RecordStore):
    """List-backed store with monotonically increasing integer ids.

    Args:
        clock: Source of ``created_at`` timestamps.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or utc_now
        self._ids = itertools.count(1)
        self._samples: list[Sample] = []
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """Return ``'memory'``."""
        return "memory"

    def insert(self, sample: Sample) -> Sample:
        with self._lock:
            stored = replace(sample, id=next(self._ids), created_at=self._clock())
            self._samples.append(stored)
        return stored

    def _snapshot(self) -> list[Sample]:
        with self._lock:
            return list(self._samples)

    def find_latest_by_observed_at(self) -> Sample | None:
        samples = self._snapshot()
        if not samples:
            return None
        return max(samples, key=_order_key)

    def find_page(self, limit: int, offset: int, anomaly_only: bool = False) -> Page:
        samples = self._snapshot()
        if anomaly_only:
            samples = [s for s in samples if s.is_anomaly]
        samples.sort(key=_order_key, reverse=True)
        return Page(items=samples[offset : offset + limit], total=len(samples))

    def aggregate(self) -> AggregateStats:
        return aggregate_samples(self._snapshot())

    def aggregate_by_day(self, tz: tzinfo) -> list[DailyRollup]:
        return rollup_by_day(self._snapshot(), tz)

    def find_anomalies(self) -> list[Sample]:
        return sorted((s for s in self._snapshot() if s.is_anomaly), key=_order_key)

    def close(self) -> None:
        """No-op; samples stay readable until the store is discarded."""
