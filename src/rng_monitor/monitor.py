"""Monitor: the composition root of rng-monitor.

Wires the pipeline from configuration:
    entropy source + record store -> Sampler -> ClockAlignedScheduler
    record store -> QueryService

and owns the lifecycle of everything it built (start, stop, close).
Collaborators passed in explicitly are used as-is, which is how tests
swap in mock sources, in-memory stores and fake clocks.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from rng_monitor.config import MonitorConfig, resolve_timezone, validate_config
from rng_monitor.entropy.registry import build_entropy_source
from rng_monitor.logging.logger import GenerationLogger
from rng_monitor.query.service import QueryService
from rng_monitor.sampling.sampler import Sampler
from rng_monitor.scheduling.scheduler import ClockAlignedScheduler
from rng_monitor.store.base import build_record_store

if TYPE_CHECKING:
    from collections.abc import Callable

    from rng_monitor.entropy.base import EntropySource
    from rng_monitor.store.base import RecordStore

logger = logging.getLogger("rng_monitor")


class Monitor:
    """Owns the sampler, scheduler and query service for one sample stream.

    Args:
        config: Settings; loaded from the environment when omitted.
        store: Record store to use instead of building one from config.
        source: Entropy source to use instead of building one from config.
        clock: Time source shared by the sampler and scheduler.

    Raises:
        ConfigValidationError: If *config* fails validation.
    """

    def __init__(
        self,
        config: MonitorConfig | None = None,
        store: RecordStore | None = None,
        source: EntropySource | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config if config is not None else MonitorConfig()
        validate_config(self.config)

        self.store = store if store is not None else build_record_store(self.config)
        self.source = source if source is not None else build_entropy_source(self.config)
        self.generation_logger = GenerationLogger(self.config)
        self.sampler = Sampler(
            self.source,
            self.store,
            generation_logger=self.generation_logger,
            clock=clock,
        )
        self.scheduler = ClockAlignedScheduler(
            self.sampler.generate,
            interval_s=self.config.tick_interval_s,
            clock=clock,
            run_on_start=self.config.run_on_start,
        )
        self.query = QueryService(self.store, resolve_timezone(self.config.chart_timezone))

    def start(self) -> None:
        """Start scheduled generation if enabled in config."""
        if not self.config.scheduler_enabled:
            logger.info("Scheduler disabled; serving queries only")
            return
        self.scheduler.start()

    def stop(self) -> None:
        """Stop scheduling, wait for an in-flight write, then release resources."""
        self.scheduler.stop(wait=True)
        self.store.close()
        self.source.close()

    def health(self) -> dict[str, Any]:
        """Status of the scheduler, entropy source and store."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "scheduler": {
                "state": self.scheduler.state.value,
                "interval_s": self.scheduler.interval_s,
                "fired": self.scheduler.fired_count,
                "skipped": self.scheduler.skipped_count,
                "failed": self.scheduler.failed_count,
            },
            "entropy_source": self.source.health_check(),
            "store": self.store.health_check(),
        }
