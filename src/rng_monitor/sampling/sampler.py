"""The Sampler: one secure random draw per invocation, scored and persisted.

Orchestrates the per-tick pipeline:
    scheduled time -> minute floor -> 16 random bytes -> hex -> scores ->
    anomaly flag -> store insert -> generation log.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rng_monitor.sampling.scoring import HEX_ALPHABET, chi_squared, is_anomaly, shannon_entropy
from rng_monitor.sampling.types import Sample

if TYPE_CHECKING:
    from collections.abc import Callable

    from rng_monitor.entropy.base import EntropySource
    from rng_monitor.logging.logger import GenerationLogger
    from rng_monitor.store.base import RecordStore

logger = logging.getLogger("rng_monitor")

# 16 bytes encode to the 32 hex characters of Sample.value.
SAMPLE_BYTES = 16


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def floor_to_minute(moment: datetime) -> datetime:
    """Truncate *moment* to the start of its minute, in UTC.

    Naive datetimes are taken to already be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    else:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(second=0, microsecond=0)


class Sampler:
    """Produces, scores and persists one Sample per call to :meth:`generate`.

    The Sampler does not retry and does not swallow errors: entropy and
    storage failures propagate to the caller (normally the scheduler), which
    decides how a failed tick is reported.

    Args:
        source: Provider of random bytes.
        store: Record store receiving each sample.
        generation_logger: Optional observability sink, called after insert.
        clock: Time source used when no scheduled time is given.
    """

    def __init__(
        self,
        source: EntropySource,
        store: RecordStore,
        generation_logger: GenerationLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._source = source
        self._store = store
        self._generation_logger = generation_logger
        self._clock = clock or utc_now

    def draw_value(self) -> str:
        """Draw 16 bytes and encode them as 32 lowercase hex characters.

        Raises:
            EntropyUnavailableError: If the source returns the wrong length.
        """
        return self._source.read_exact(SAMPLE_BYTES).hex()

    def score(self, value: str, observed_at: datetime) -> Sample:
        """Build an unpersisted Sample for *value*."""
        chi_sq = chi_squared(value, HEX_ALPHABET)
        return Sample(
            value=value,
            observed_at=observed_at,
            entropy=shannon_entropy(value),
            chi_squared=chi_sq,
            is_anomaly=is_anomaly(chi_sq),
        )

    def generate(self, scheduled_at: datetime | None = None) -> Sample:
        """Run one generation and return the persisted Sample.

        Args:
            scheduled_at: The tick's boundary time. Defaults to the clock.

        Returns:
            The stored Sample, with ``id`` and ``created_at`` assigned.

        Raises:
            EntropyUnavailableError: If the source cannot provide bytes.
            StorageError: If the store rejects the insert.
        """
        observed_at = floor_to_minute(scheduled_at if scheduled_at is not None else self._clock())
        sample = self.score(self.draw_value(), observed_at)
        stored = self._store.insert(sample)
        if self._generation_logger is not None:
            self._generation_logger.log_generation(stored)
        return stored
