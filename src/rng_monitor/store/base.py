"""Abstract record store and the config-driven backend factory.

The store is an append-only log of Samples. Each query the application
needs is a distinct typed operation rather than an ad hoc query builder:
latest, filtered page, whole-table aggregate, per-day rollup, and the
unpaginated anomaly list.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import tzinfo

    from rng_monitor.config import MonitorConfig
    from rng_monitor.sampling.types import Sample
    from rng_monitor.store.types import AggregateStats, DailyRollup, Page

logger = logging.getLogger("rng_monitor")


class RecordStore(ABC):
    """Append-only persistence for Samples.

    Implementations must be safe to call from the scheduler's worker thread
    and the API's request threads at the same time. Driver failures are
    raised as :class:`~rng_monitor.exceptions.StorageError`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., ``'sqlite'``)."""

    @abstractmethod
    def insert(self, sample: Sample) -> Sample:
        """Persist *sample* and return a copy with ``id`` and ``created_at`` set."""

    @abstractmethod
    def find_latest_by_observed_at(self) -> Sample | None:
        """Return the sample with the greatest ``observed_at``, or ``None``."""

    @abstractmethod
    def find_page(self, limit: int, offset: int, anomaly_only: bool = False) -> Page:
        """Return one page ordered by ``observed_at`` descending.

        Args:
            limit: Maximum number of items, positive.
            offset: Number of matching rows to skip, non-negative.
            anomaly_only: Restrict to anomalous samples.

        Returns:
            The page and the count of all rows matching the filter.
        """

    @abstractmethod
    def aggregate(self) -> AggregateStats:
        """Count, anomaly count and min/avg/max of both scores."""

    @abstractmethod
    def aggregate_by_day(self, tz: tzinfo) -> list[DailyRollup]:
        """Per-calendar-day rollups in *tz*, oldest day first."""

    @abstractmethod
    def find_anomalies(self) -> list[Sample]:
        """Every anomalous sample, oldest ``observed_at`` first."""

    @abstractmethod
    def close(self) -> None:
        """Release connections and file handles."""

    def health_check(self) -> dict[str, Any]:
        """Return a status dictionary for this store."""
        return {"store": self.name, "healthy": True}


def build_record_store(config: MonitorConfig) -> RecordStore:
    """Instantiate the backend named by ``config.store_backend``.

    Raises:
        ValueError: If the backend name is unknown.
    """
    if config.store_backend == "memory":
        from rng_monitor.store.memory import InMemoryRecordStore

        store: RecordStore = InMemoryRecordStore()
    elif config.store_backend == "sqlite":
        from rng_monitor.store.sqlite import SQLiteRecordStore

        store = SQLiteRecordStore(config.database_path, timeout_s=config.store_timeout_s)
    else:
        raise ValueError(f"Unknown store backend: {config.store_backend!r}")
    logger.info("Using %s record store", store.name)
    return store
