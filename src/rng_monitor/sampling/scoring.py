"""Randomness scoring for fixed-alphabet strings.

Pure functions, no state, no I/O. Counting is done with numpy over the
string's code points, so scores are independent of character order.

Anomaly policy: a sample is flagged when its chi-squared statistic falls
outside [5, 30]. With 15 degrees of freedom the p=0.05 and p=0.01 upper
critical values are 24.996 and 30.578; the lower bound flags strings that
are too uniform to be plausible. Both thresholds are fixed constants so
that historical classifications stay comparable.
"""

from __future__ import annotations

import math

import numpy as np

from rng_monitor.exceptions import ScoringError

HEX_ALPHABET = "0123456789abcdef"

DEGREES_OF_FREEDOM = len(HEX_ALPHABET) - 1

ANOMALY_UPPER_THRESHOLD = 30.0
ANOMALY_LOWER_THRESHOLD = 5.0


def _code_points(s: str) -> np.ndarray:
    return np.frombuffer(s.encode("utf-32-le"), dtype=np.uint32)


def shannon_entropy(s: str) -> float:
    """Shannon entropy of *s* in bits per symbol.

    Uses the empirical distribution of the characters actually present,
    so a string of one repeated character scores 0 and a string using all
    16 hex digits equally often scores 4.

    Args:
        s: Input string. May be empty.

    Returns:
        Entropy in bits/symbol; ``0.0`` for the empty string.
    """
    if not s:
        return 0.0
    _, counts = np.unique(_code_points(s), return_counts=True)
    probs = counts / len(s)
    entropy = float(-np.sum(probs * np.log2(probs)))
    # -0.0 for a single-symbol string.
    return abs(entropy)


def chi_squared(s: str, alphabet: str = HEX_ALPHABET) -> float:
    """Pearson chi-squared statistic of *s* against a uniform *alphabet*.

    Every alphabet symbol contributes a term, including symbols that do
    not occur in *s*. Characters outside the alphabet are ignored.

    Args:
        s: Input string.
        alphabet: Ordered, non-empty set of symbols.

    Returns:
        ``sum((observed - expected)**2 / expected)`` with
        ``expected = len(s) / len(alphabet)``.

    Raises:
        ScoringError: If *alphabet* is empty or *s* is empty (expected
            count would be zero).
    """
    if not alphabet:
        raise ScoringError("Cannot compute chi-squared over an empty alphabet")
    if not s:
        raise ScoringError("Cannot compute chi-squared of an empty string")

    symbols = _code_points(alphabet)
    observed = (_code_points(s)[:, None] == symbols[None, :]).sum(axis=0)
    expected = len(s) / len(symbols)
    return float(np.sum((observed - expected) ** 2 / expected))


def is_anomaly(chi_squared_value: float) -> bool:
    """Classify a chi-squared statistic.

    Both thresholds are strict: exactly 30 or exactly 5 is not an anomaly.
    """
    if math.isnan(chi_squared_value):
        raise ScoringError("Cannot classify a NaN chi-squared statistic")
    return (
        chi_squared_value > ANOMALY_UPPER_THRESHOLD
        or chi_squared_value < ANOMALY_LOWER_THRESHOLD
    )
