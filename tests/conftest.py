"""Shared pytest fixtures for rng-monitor tests.

Provides quiet configuration objects, deterministic entropy sources, both
record store backends, and a factory for building Samples with sensible
defaults.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from rng_monitor.config import MonitorConfig
from rng_monitor.entropy.mock import MockEntropySource
from rng_monitor.sampling.types import Sample
from rng_monitor.store.memory import InMemoryRecordStore
from rng_monitor.store.sqlite import SQLiteRecordStore

# Fixed reference instant used across tests.
T0 = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)

# Every hex digit exactly twice: chi-squared 0, entropy 4.
UNIFORM_VALUE = "0123456789abcdef" * 2

# A typical, non-anomalous value: chi-squared 8.0, entropy 3.75.
TYPICAL_VALUE = "00001111445566778899aabbccddeeff"


@pytest.fixture
def silent_config() -> MonitorConfig:
    """Return an in-memory, scheduler-less config with no generation logging."""
    return MonitorConfig(
        _env_file=None,  # type: ignore[call-arg]
        store_backend="memory",
        log_level="none",
        scheduler_enabled=False,
    )


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    """Return an empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Iterator[SQLiteRecordStore]:
    """Return an empty SQLite store in a temporary directory."""
    store = SQLiteRecordStore(tmp_path / "generations.db")
    yield store
    store.close()


@pytest.fixture
def zero_source() -> MockEntropySource:
    """Return a source whose every draw encodes to 32 '0' characters."""
    return MockEntropySource(pattern=b"\x00")


@pytest.fixture
def uniform_source() -> MockEntropySource:
    """Return a source whose every draw uses each hex digit exactly twice."""
    return MockEntropySource(pattern=bytes.fromhex("0123456789abcdef"))


@pytest.fixture
def seeded_source() -> MockEntropySource:
    """Return a reproducible pseudo-random source."""
    return MockEntropySource(seed=42)


@pytest.fixture
def make_sample() -> Callable[..., Sample]:
    """Return a factory for unpersisted Samples.

    ``make_sample(minutes=3, anomaly=True)`` builds a sample observed three
    minutes after ``T0``; any Sample field can be overridden by keyword.
    """

    def factory(minutes: int = 0, anomaly: bool = False, **overrides: object) -> Sample:
        fields: dict[str, object] = {
            "value": UNIFORM_VALUE if anomaly else TYPICAL_VALUE,
            "observed_at": T0 + timedelta(minutes=minutes),
            "entropy": 4.0 if anomaly else 3.75,
            "chi_squared": 0.0 if anomaly else 8.0,
            "is_anomaly": anomaly,
        }
        fields.update(overrides)
        return Sample(**fields)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def t0() -> datetime:
    """Return the reference instant that ``make_sample`` offsets from."""
    return T0
