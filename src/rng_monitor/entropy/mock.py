"""Deterministic mock entropy source for tests and demos.

Either replays a fixed byte pattern (to force particular hex strings
through the pipeline) or draws from a seeded numpy generator.
"""

from __future__ import annotations

import numpy as np

from rng_monitor.entropy.base import EntropySource
from rng_monitor.entropy.registry import register_entropy_source
from rng_monitor.exceptions import EntropyUnavailableError


@register_entropy_source("mock")
class MockEntropySource(EntropySource):
    """Reproducible entropy source.

    Usage:
        - ``MockEntropySource(seed=42)``: uniform bytes from a seeded RNG.
        - ``MockEntropySource(pattern=b"\\x00")``: the pattern repeated, so
          every draw encodes to ``"0000..."``.

    Args:
        seed: Optional RNG seed for reproducible output.
        pattern: Optional byte pattern to cycle through instead of the RNG.
    """

    def __init__(self, seed: int | None = None, pattern: bytes | None = None) -> None:
        if pattern is not None and not pattern:
            raise ValueError("pattern must contain at least one byte")
        self._seed = seed
        self._pattern = pattern
        self._rng = np.random.default_rng(seed)
        self._closed = False

    @property
    def name(self) -> str:
        """Return ``'mock'``."""
        return "mock"

    @property
    def is_available(self) -> bool:
        """``True`` until :meth:`close` is called."""
        return not self._closed

    def get_random_bytes(self, n: int) -> bytes:
        """Return *n* bytes from the pattern or the seeded generator.

        Raises:
            EntropyUnavailableError: If the source has been closed.
        """
        if self._closed:
            raise EntropyUnavailableError("MockEntropySource is closed")
        if self._pattern is not None:
            repeats = n // len(self._pattern) + 1
            return (self._pattern * repeats)[:n]
        return self._rng.integers(0, 256, size=n, dtype=np.uint8).tobytes()

    def close(self) -> None:
        """Mark the source unavailable."""
        self._closed = True
