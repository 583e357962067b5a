"""The interface every entropy source implements.

A source hands out raw bytes; turning them into a hex sample and scoring
it is the sampler's job. Concrete sources implement ``name``,
``is_available``, ``get_random_bytes()`` and ``close()``. The base class
adds :meth:`EntropySource.read_exact`, which the sampler calls, and the
status dictionary reported by ``/health``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from rng_monitor.exceptions import EntropyUnavailableError


class EntropySource(ABC):
    """A provider of random bytes.

    The sampler reads 16 bytes once per tick, so implementations need no
    buffering. They must be safe to call from the scheduler's worker thread.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry name of the source, such as ``'system'``."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether a read is currently expected to succeed."""

    @abstractmethod
    def get_random_bytes(self, n: int) -> bytes:
        """Return *n* random bytes.

        Raises:
            EntropyUnavailableError: If the source cannot serve the read.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the source. Later reads must fail."""

    def read_exact(self, n: int) -> bytes:
        """Read *n* bytes and verify the length.

        Raises:
            EntropyUnavailableError: If the source returns a different length.
        """
        raw = self.get_random_bytes(n)
        if len(raw) != n:
            raise EntropyUnavailableError(
                f"Entropy source {self.name!r} returned {len(raw)} bytes, expected {n}"
            )
        return raw

    def health_check(self) -> dict[str, Any]:
        """``{"source": name, "healthy": is_available}``."""
        return {"source": self.name, "healthy": self.is_available}
