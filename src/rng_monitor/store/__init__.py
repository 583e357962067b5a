"""Record store subsystem for rng-monitor.

Re-exports the ABC, result types, both built-in backends and the
config-driven factory::

    from rng_monitor.store import RecordStore, build_record_store
"""

from rng_monitor.store.base import RecordStore, build_record_store
from rng_monitor.store.memory import InMemoryRecordStore
from rng_monitor.store.sqlite import SQLiteRecordStore
from rng_monitor.store.types import AggregateStats, DailyRollup, Page

__all__ = [
    "AggregateStats",
    "DailyRollup",
    "InMemoryRecordStore",
    "Page",
    "RecordStore",
    "SQLiteRecordStore",
    "build_record_store",
]
