"""Entropy source subsystem for rng-monitor.

Re-exports the ABC, registry, and the built-in source implementations::

    from rng_monitor.entropy import EntropySource, EntropySourceRegistry
    from rng_monitor.entropy import SystemEntropySource, MockEntropySource
"""

from rng_monitor.entropy.base import EntropySource
from rng_monitor.entropy.mock import MockEntropySource
from rng_monitor.entropy.registry import (
    EntropySourceRegistry,
    build_entropy_source,
    register_entropy_source,
)
from rng_monitor.entropy.system import SystemEntropySource

__all__ = [
    "EntropySource",
    "EntropySourceRegistry",
    "MockEntropySource",
    "SystemEntropySource",
    "build_entropy_source",
    "register_entropy_source",
]
