"""Per-generation logging subsystem for rng-monitor.

Provides the observability sink that receives every persisted sample and
writes it to the ``"rng_monitor"`` logger at the configured verbosity.
"""

from rng_monitor.logging.logger import GenerationLogger, sample_to_record

__all__ = [
    "GenerationLogger",
    "sample_to_record",
]
