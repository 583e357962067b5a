"""SQLite record store.

One ``generations`` table, created idempotently on open. Timestamps are
stored as ISO-8601 UTC text with microsecond precision so that string
order equals time order; rows in any other form (naive, space-separated,
``Z`` suffix) are rewritten on open. A single connection is shared
across threads and serialised with a lock; the sqlite3 busy timeout
bounds each operation.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from rng_monitor.exceptions import StorageError
from rng_monitor.sampling.sampler import utc_now
from rng_monitor.sampling.types import Sample
from rng_monitor.store.base import RecordStore
from rng_monitor.store.rollup import rollup_scores_by_day
from rng_monitor.store.types import AggregateStats, DailyRollup, Page

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from datetime import tzinfo

logger = logging.getLogger("rng_monitor")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS generations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    value TEXT NOT NULL,
    observed_at TEXT NOT NULL,
    entropy REAL,
    chi_squared REAL,
    is_anomaly INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_generations_observed_at ON generations (observed_at);
"""

_COLUMNS = "id, value, observed_at, entropy, chi_squared, is_anomaly, created_at"

# Canonical text is fixed-width: "2026-10-18T12:00:00.000000+00:00".
_NOT_CANONICAL = (
    "(length({column}) != 32 OR substr({column}, 11, 1) != 'T' "
    "OR substr({column}, 27) != '+00:00')"
)

_UTC_ZONE_KEYS = frozenset(
    {"UTC", "Etc/UTC", "Etc/UCT", "Etc/Universal", "Etc/Zulu", "UCT", "Universal", "Zulu"}
)


def _to_text(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_text(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        # Legacy rows written without an offset.
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _is_utc(tz: tzinfo) -> bool:
    if isinstance(tz, timezone):
        return tz.utcoffset(None) == timedelta(0)
    return getattr(tz, "key", None) in _UTC_ZONE_KEYS


def _row_to_sample(row: sqlite3.Row) -> Sample:
    return Sample(
        id=row["id"],
        value=row["value"],
        observed_at=_from_text(row["observed_at"]),
        entropy=row["entropy"],
        chi_squared=row["chi_squared"],
        is_anomaly=bool(row["is_anomaly"]),
        created_at=_from_text(row["created_at"]),
    )


class SQLiteRecordStore(RecordStore):
    """Durable store backed by a single SQLite database file.

    Args:
        path: Database file, or ``':memory:'``.
        timeout_s: Busy timeout applied to every statement.
        clock: Source of ``created_at`` timestamps.

    Raises:
        StorageError: If the database cannot be opened or migrated.
    """

    def __init__(
        self,
        path: str | Path,
        timeout_s: float = 5.0,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = str(path)
        self._clock = clock or utc_now
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(self._path, timeout=timeout_s, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
            self._normalize_legacy_timestamps()
        except (sqlite3.Error, ValueError) as exc:
            raise StorageError(f"Failed to open SQLite store at {self._path!r}: {exc}") from exc
        logger.debug("Opened SQLite store at %s", self._path)

    def _normalize_legacy_timestamps(self) -> None:
        """Rewrite timestamps not in the canonical form, e.g. ``2026-10-18 23:00:00``.

        Ordering and the UTC day rollup compare the stored text directly, so
        every row must use the fixed-width UTC form that ``_to_text`` writes.
        """
        rows = self._conn.execute(
            "SELECT id, observed_at, created_at FROM generations "
            f"WHERE {_NOT_CANONICAL.format(column='observed_at')} "
            f"OR {_NOT_CANONICAL.format(column='created_at')}"
        ).fetchall()
        if not rows:
            return
        updates = [
            (
                _to_text(_from_text(row["observed_at"])),
                _to_text(_from_text(row["created_at"])),
                row["id"],
            )
            for row in rows
        ]
        with self._conn:
            self._conn.executemany(
                "UPDATE generations SET observed_at = ?, created_at = ? WHERE id = ?",
                updates,
            )
        logger.info("Normalised %d legacy timestamp row(s) in %s", len(updates), self._path)

    @property
    def name(self) -> str:
        """Return ``'sqlite'``."""
        return "sqlite"

    @contextmanager
    def _cursor(self, action: str) -> Iterator[sqlite3.Cursor]:
        """Serialise access and translate driver errors into StorageError."""
        with self._lock:
            try:
                with self._conn:
                    yield self._conn.cursor()
            except sqlite3.Error as exc:
                raise StorageError(f"Failed to {action}: {exc}") from exc

    def insert(self, sample: Sample) -> Sample:
        created_at = self._clock()
        with self._cursor("insert generation") as cur:
            cur.execute(
                "INSERT INTO generations "
                "(value, observed_at, entropy, chi_squared, is_anomaly, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    sample.value,
                    _to_text(sample.observed_at),
                    sample.entropy,
                    sample.chi_squared,
                    int(sample.is_anomaly),
                    _to_text(created_at),
                ),
            )
            new_id = cur.lastrowid
        return Sample(
            id=new_id,
            value=sample.value,
            observed_at=_from_text(_to_text(sample.observed_at)),
            entropy=sample.entropy,
            chi_squared=sample.chi_squared,
            is_anomaly=sample.is_anomaly,
            created_at=_from_text(_to_text(created_at)),
        )

    def find_latest_by_observed_at(self) -> Sample | None:
        with self._cursor("fetch latest generation") as cur:
            row = cur.execute(
                f"SELECT {_COLUMNS} FROM generations "
                "ORDER BY observed_at DESC, id DESC LIMIT 1"
            ).fetchone()
        return _row_to_sample(row) if row is not None else None

    def find_page(self, limit: int, offset: int, anomaly_only: bool = False) -> Page:
        where = "WHERE is_anomaly = 1" if anomaly_only else ""
        with self._cursor("fetch generation page") as cur:
            total = cur.execute(f"SELECT COUNT(*) FROM generations {where}").fetchone()[0]
            rows = cur.execute(
                f"SELECT {_COLUMNS} FROM generations {where} "
                "ORDER BY observed_at DESC, id DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
        return Page(items=[_row_to_sample(r) for r in rows], total=total)

    def aggregate(self) -> AggregateStats:
        with self._cursor("aggregate generations") as cur:
            row = cur.execute(
                "SELECT COUNT(*) AS count, "
                "COALESCE(SUM(is_anomaly), 0) AS anomaly_count, "
                "AVG(entropy) AS avg_entropy, MIN(entropy) AS min_entropy, "
                "MAX(entropy) AS max_entropy, AVG(chi_squared) AS avg_chi_squared, "
                "MIN(chi_squared) AS min_chi_squared, MAX(chi_squared) AS max_chi_squared "
                "FROM generations"
            ).fetchone()
        return AggregateStats(
            count=row["count"],
            anomaly_count=row["anomaly_count"],
            avg_entropy=row["avg_entropy"],
            min_entropy=row["min_entropy"],
            max_entropy=row["max_entropy"],
            avg_chi_squared=row["avg_chi_squared"],
            min_chi_squared=row["min_chi_squared"],
            max_chi_squared=row["max_chi_squared"],
        )

    def aggregate_by_day(self, tz: tzinfo) -> list[DailyRollup]:
        if _is_utc(tz):
            # Stored text is UTC ISO-8601, so the first 10 characters are the UTC date.
            with self._cursor("aggregate generations by day") as cur:
                rows = cur.execute(
                    "SELECT substr(observed_at, 1, 10) AS day, COUNT(*) AS count, "
                    "COALESCE(SUM(is_anomaly), 0) AS anomaly_count, "
                    "AVG(entropy) AS avg_entropy, AVG(chi_squared) AS avg_chi_squared "
                    "FROM generations GROUP BY day ORDER BY day ASC"
                ).fetchall()
            return [
                DailyRollup(
                    day=date.fromisoformat(row["day"]),
                    count=row["count"],
                    anomaly_count=row["anomaly_count"],
                    avg_entropy=row["avg_entropy"],
                    avg_chi_squared=row["avg_chi_squared"],
                )
                for row in rows
            ]

        with self._cursor("aggregate generations by day") as cur:
            rows = cur.execute(
                "SELECT observed_at, is_anomaly, entropy, chi_squared FROM generations"
            ).fetchall()
        return rollup_scores_by_day(
            ((_from_text(r[0]), bool(r[1]), r[2], r[3]) for r in rows),
            tz,
        )

    def find_anomalies(self) -> list[Sample]:
        with self._cursor("fetch anomalies") as cur:
            rows = cur.execute(
                f"SELECT {_COLUMNS} FROM generations WHERE is_anomaly = 1 "
                "ORDER BY observed_at ASC, id ASC"
            ).fetchall()
        return [_row_to_sample(r) for r in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def health_check(self) -> dict[str, object]:
        """Probe the connection with a trivial query."""
        try:
            with self._cursor("probe store") as cur:
                cur.execute("SELECT 1").fetchone()
        except StorageError:
            logger.warning("SQLite store health probe failed", exc_info=True)
            return {"store": self.name, "healthy": False, "path": self._path}
        return {"store": self.name, "healthy": True, "path": self._path}
