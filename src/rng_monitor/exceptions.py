"""Exception hierarchy for rng-monitor.

All exceptions derive from RngMonitorError, enabling broad catch patterns
at the API boundary and in the scheduler while allowing fine-grained
handling internally.
"""


class RngMonitorError(Exception):
    """Base exception for all rng-monitor errors."""


class EntropyUnavailableError(RngMonitorError):
    """The entropy source cannot provide bytes.

    Raised when a source is closed, misconfigured, or returns fewer bytes
    than requested.
    """


class ScoringError(RngMonitorError):
    """Scorer input is malformed.

    Raised for an empty alphabet or an empty string passed to the
    chi-squared statistic. This is a programming error, never a
    recoverable runtime condition.
    """


class StorageError(RngMonitorError):
    """The record store failed to read or write.

    Backends wrap driver-level errors in this type so that callers do not
    depend on a particular storage engine.
    """


class ConfigValidationError(RngMonitorError):
    """Configuration field validation failed.

    Raised when a setting names an unknown backend, log level or time zone,
    or when the scheduler interval cannot be aligned to wall-clock days.
    """
