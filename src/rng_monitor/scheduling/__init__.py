"""Clock-aligned scheduling of sample generation."""

from rng_monitor.scheduling.scheduler import (
    ClockAlignedScheduler,
    SchedulerState,
    next_boundary,
)

__all__ = [
    "ClockAlignedScheduler",
    "SchedulerState",
    "next_boundary",
]
