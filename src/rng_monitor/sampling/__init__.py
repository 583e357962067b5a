"""Sampling subsystem: scoring, the Sample value type, and the Sampler."""

from rng_monitor.sampling.sampler import Sampler, floor_to_minute
from rng_monitor.sampling.scoring import (
    ANOMALY_LOWER_THRESHOLD,
    ANOMALY_UPPER_THRESHOLD,
    DEGREES_OF_FREEDOM,
    HEX_ALPHABET,
    chi_squared,
    is_anomaly,
    shannon_entropy,
)
from rng_monitor.sampling.types import Sample

__all__ = [
    "ANOMALY_LOWER_THRESHOLD",
    "ANOMALY_UPPER_THRESHOLD",
    "DEGREES_OF_FREEDOM",
    "HEX_ALPHABET",
    "Sample",
    "Sampler",
    "chi_squared",
    "floor_to_minute",
    "is_anomaly",
    "shannon_entropy",
]
