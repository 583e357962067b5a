"""rng-monitor: scheduled CSPRNG sampling with randomness-quality monitoring.

Draws 16 secure random bytes at every wall-clock minute, scores the hex
string with Shannon entropy and a chi-squared goodness-of-fit test,
flags outliers, persists every sample, and serves history and aggregate
statistics over HTTP.
"""

from __future__ import annotations

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("rng-monitor")
except PackageNotFoundError:
    __version__ = "0.0.0"

from rng_monitor.config import MonitorConfig, validate_config
from rng_monitor.exceptions import (
    ConfigValidationError,
    EntropyUnavailableError,
    RngMonitorError,
    ScoringError,
    StorageError,
)
from rng_monitor.monitor import Monitor
from rng_monitor.query.service import QueryService
from rng_monitor.sampling.sampler import Sampler
from rng_monitor.sampling.types import Sample
from rng_monitor.scheduling.scheduler import ClockAlignedScheduler

__all__ = [
    "ClockAlignedScheduler",
    "ConfigValidationError",
    "EntropyUnavailableError",
    "Monitor",
    "MonitorConfig",
    "QueryService",
    "RngMonitorError",
    "Sample",
    "Sampler",
    "ScoringError",
    "StorageError",
    "__version__",
    "validate_config",
]
