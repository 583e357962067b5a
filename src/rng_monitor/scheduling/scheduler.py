"""Wall-clock aligned scheduler.

Fires a job at every multiple of ``interval_s`` seconds since the Unix
epoch (every minute at :00 for the default 60 s), regardless of when the
process started. Missed boundaries are never backfilled.

Threading model:
    - one daemon timing thread that only waits and submits;
    - one single-worker executor that runs the job, so a slow job never
      delays the timing loop;
    - a tick arriving while the previous job is still running is skipped
      with a warning.

Job failures are logged from a future done-callback and never reach the
timing thread.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger("rng_monitor")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SchedulerState(enum.Enum):
    """Lifecycle states of :class:`ClockAlignedScheduler`."""

    IDLE = "idle"
    ARMED = "armed"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_boundary(now: datetime, interval_s: int) -> datetime:
    """Return the first boundary strictly after *now*.

    Boundaries are multiples of *interval_s* seconds since the epoch, UTC.

    Args:
        now: Reference time; naive values are taken as UTC.
        interval_s: Boundary spacing in seconds, positive.
    """
    if interval_s <= 0:
        raise ValueError(f"interval_s must be positive, got {interval_s}")
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed = now - _EPOCH
    elapsed_us = (elapsed.days * 86_400 + elapsed.seconds) * 1_000_000 + elapsed.microseconds
    interval_us = interval_s * 1_000_000
    ticks = elapsed_us // interval_us + 1
    return _EPOCH + timedelta(microseconds=ticks * interval_us)


class ClockAlignedScheduler:
    """Runs *job* at every wall-clock boundary until stopped.

    Args:
        job: Called with the tick's scheduled time (an aware UTC datetime).
        interval_s: Boundary spacing in seconds.
        clock: Time source; injectable for tests.
        run_on_start: Fire once immediately from :meth:`start`.
    """

    def __init__(
        self,
        job: Callable[[datetime], object],
        interval_s: int = 60,
        clock: Callable[[], datetime] | None = None,
        run_on_start: bool = True,
    ) -> None:
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self._job = job
        self._interval_s = interval_s
        self._clock = clock or _utc_now
        self._run_on_start = run_on_start

        self._state = SchedulerState.IDLE
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._thread: threading.Thread | None = None
        self._inflight: Future[object] | None = None
        self._last_boundary: datetime | None = None

        self.fired_count = 0
        self.skipped_count = 0
        self.failed_count = 0

    @property
    def state(self) -> SchedulerState:
        """Current lifecycle state."""
        return self._state

    @property
    def interval_s(self) -> int:
        """Seconds between boundaries."""
        return self._interval_s

    def start(self) -> None:
        """Arm the scheduler and start the timing thread.

        Raises:
            RuntimeError: If the scheduler is already armed or was stopped.
        """
        with self._lock:
            if self._state is SchedulerState.ARMED:
                raise RuntimeError("Scheduler is already running")
            if self._stop_event.is_set():
                raise RuntimeError("Scheduler cannot be restarted after stop()")
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="rng-monitor-generate"
            )
            self._state = SchedulerState.ARMED

        if self._run_on_start:
            self.fire(self._clock())

        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="rng-monitor-scheduler",
        )
        self._thread.start()
        logger.info("Scheduler armed: generating every %ds on wall-clock boundaries", self._interval_s)

    def fire(self, scheduled_at: datetime) -> Future[object] | None:
        """Submit one tick to the worker.

        Returns:
            The job's future, or ``None`` if the tick was skipped because the
            previous tick is still running or the scheduler is not armed.
        """
        with self._lock:
            if self._state is not SchedulerState.ARMED or self._executor is None:
                logger.debug("Ignoring tick at %s: scheduler is %s", scheduled_at, self._state.value)
                return None
            if self._inflight is not None and not self._inflight.done():
                self.skipped_count += 1
                logger.warning(
                    "Skipping tick at %s: previous generation still running",
                    scheduled_at.isoformat(),
                )
                return None
            future = self._executor.submit(self._job, scheduled_at)
            self._inflight = future
            self.fired_count += 1

        future.add_done_callback(lambda f: self._on_done(f, scheduled_at))
        return future

    def _on_done(self, future: Future[object], scheduled_at: datetime) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            with self._lock:
                self.failed_count += 1
            logger.error(
                "Generation tick at %s failed: %s",
                scheduled_at.isoformat(),
                exc,
                exc_info=exc,
            )

    def _run_loop(self) -> None:
        """Wait for each boundary and fire it, until the stop event is set."""
        while not self._stop_event.is_set():
            boundary = next_boundary(self._clock(), self._interval_s)
            if self._last_boundary is not None and boundary <= self._last_boundary:
                boundary = self._last_boundary + timedelta(seconds=self._interval_s)
            delay = (boundary - self._clock()).total_seconds()
            if self._stop_event.wait(max(delay, 0.0)):
                break
            # Early wake-ups (coarse timers) wait out the remainder.
            remaining = (boundary - self._clock()).total_seconds()
            if remaining > 0 and self._stop_event.wait(remaining):
                break
            self._last_boundary = boundary
            self.fire(boundary)

    def stop(self, wait: bool = True) -> None:
        """Stop future ticks; an in-flight generation is allowed to finish.

        Args:
            wait: Block until the timing thread exits and the in-flight job
                completes.
        """
        with self._lock:
            if self._state is SchedulerState.IDLE and self._executor is None:
                return
            self._stop_event.set()
            self._state = SchedulerState.IDLE
            executor = self._executor
            self._executor = None

        if self._thread is not None and wait:
            self._thread.join()
        if executor is not None:
            executor.shutdown(wait=wait)
        logger.info("Scheduler stopped")
