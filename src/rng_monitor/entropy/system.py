"""Production entropy source: the operating system CSPRNG.

Reads through ``os.urandom()``, which uses ``getrandom(2)`` on Linux and
``BCryptGenRandom`` on Windows. An OS that cannot serve the request is
reported as :class:`EntropyUnavailableError` so the failed tick is logged
and the next one retried.
"""

from __future__ import annotations

import os

from rng_monitor.entropy.base import EntropySource
from rng_monitor.entropy.registry import register_entropy_source
from rng_monitor.exceptions import EntropyUnavailableError


@register_entropy_source("system")
class SystemEntropySource(EntropySource):
    """Cryptographically secure bytes from ``os.urandom()``."""

    def __init__(self) -> None:
        self._closed = False

    @property
    def name(self) -> str:
        return "system"

    @property
    def is_available(self) -> bool:
        """``True`` until :meth:`close` is called."""
        return not self._closed

    def get_random_bytes(self, n: int) -> bytes:
        """Return *n* bytes from the OS CSPRNG.

        Raises:
            EntropyUnavailableError: If the source is closed or the OS
                refuses the read.
        """
        if self._closed:
            raise EntropyUnavailableError("System entropy source is closed")
        try:
            return os.urandom(n)
        except (OSError, NotImplementedError) as exc:
            raise EntropyUnavailableError(f"os.urandom({n}) failed: {exc}") from exc

    def close(self) -> None:
        self._closed = True
