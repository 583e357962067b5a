"""Data types for the sampling subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Sample:
    """Immutable record of one scheduled random draw and its scores.

    Attributes:
        value: 32 lowercase hex characters (16 random bytes).
        observed_at: Scheduled minute boundary, UTC, seconds zeroed.
        entropy: Shannon entropy of ``value`` in bits/symbol, 0 to 4.
        chi_squared: Goodness-of-fit statistic against uniform hex digits.
        is_anomaly: Classification fixed at creation time.
        id: Store-assigned identifier; ``None`` until inserted.
        created_at: Time the store persisted the sample; ``None`` until inserted.
    """

    value: str
    observed_at: datetime
    entropy: float | None
    chi_squared: float | None
    is_anomaly: bool
    id: int | None = None
    created_at: datetime | None = None

    @property
    def is_persisted(self) -> bool:
        """Whether the store has assigned an id."""
        return self.id is not None
