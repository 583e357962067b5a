"""Generation logger: one log line per persisted sample.

Uses the standard ``logging`` module with the ``"rng_monitor"`` logger.
No ``print()`` statements. Supports three verbosity levels.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rng_monitor.config import MonitorConfig
    from rng_monitor.sampling.types import Sample

logger = logging.getLogger("rng_monitor")


def sample_to_record(sample: Sample) -> dict[str, Any]:
    """Flatten a Sample into JSON-safe primitives (ISO timestamps)."""
    record = asdict(sample)
    for key in ("observed_at", "created_at"):
        if record[key] is not None:
            record[key] = record[key].isoformat()
    return record


class GenerationLogger:
    """Observability sink for the Sampler.

    Log levels:
        ``"none"``: No output.

        ``"summary"``: One line per sample with timestamp, value, both
        scores and the anomaly flag. Anomalies are logged at WARNING and
        tagged ``[ANOMALY]``; everything else at INFO.

        ``"full"``: JSON dump of every Sample field.
    """

    def __init__(self, config: MonitorConfig) -> None:
        """Initialize the logger from configuration.

        Args:
            config: Configuration providing ``log_level``.
        """
        self._log_level = config.log_level
        self._count = 0
        self._anomaly_count = 0

    @property
    def generations_logged(self) -> int:
        """Samples seen since startup."""
        return self._count

    @property
    def anomalies_logged(self) -> int:
        """Anomalous samples seen since startup."""
        return self._anomaly_count

    def log_generation(self, sample: Sample) -> None:
        """Log a single persisted sample.

        Args:
            sample: The sample as returned by the record store.
        """
        self._count += 1
        if sample.is_anomaly:
            self._anomaly_count += 1

        if self._log_level == "none":
            return

        if self._log_level == "summary":
            logger.log(
                logging.WARNING if sample.is_anomaly else logging.INFO,
                "observed_at=%s value=%s entropy=%.3f chi_squared=%.3f anomaly=%s id=%s%s",
                sample.observed_at.isoformat(),
                sample.value,
                sample.entropy if sample.entropy is not None else float("nan"),
                sample.chi_squared if sample.chi_squared is not None else float("nan"),
                sample.is_anomaly,
                sample.id,
                " [ANOMALY]" if sample.is_anomaly else "",
            )
        elif self._log_level == "full":
            logger.info("generation_record: %s", json.dumps(sample_to_record(sample)))
