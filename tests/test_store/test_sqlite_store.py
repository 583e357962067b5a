"""SQLite-specific record store behaviour: durability, schema, failures."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from rng_monitor.config import MonitorConfig
from rng_monitor.exceptions import StorageError
from rng_monitor.store.base import build_record_store
from rng_monitor.store.memory import InMemoryRecordStore
from rng_monitor.store.rollup import rollup_by_day
from rng_monitor.store.sqlite import SQLiteRecordStore


class TestSQLiteRecordStore:
    """Tests for SQLiteRecordStore beyond the shared contract."""

    def test_survives_reopen(self, tmp_path, make_sample) -> None:
        path = tmp_path / "durable.db"
        store = SQLiteRecordStore(path)
        stored = store.insert(make_sample(anomaly=True))
        store.close()

        reopened = SQLiteRecordStore(path)
        try:
            assert reopened.find_latest_by_observed_at() == stored
        finally:
            reopened.close()

    def test_schema_creation_is_idempotent(self, tmp_path) -> None:
        path = tmp_path / "twice.db"
        SQLiteRecordStore(path).close()
        SQLiteRecordStore(path).close()

    def test_timestamps_stored_as_utc_text(self, tmp_path, make_sample) -> None:
        path = tmp_path / "text.db"
        store = SQLiteRecordStore(path)
        store.insert(make_sample())
        store.close()

        conn = sqlite3.connect(path)
        try:
            (observed,) = conn.execute("SELECT observed_at FROM generations").fetchone()
        finally:
            conn.close()
        assert observed == "2026-10-18T12:00:00.000000+00:00"

    def test_created_at_from_clock(self, tmp_path, make_sample) -> None:
        moment = datetime(2026, 10, 18, 12, 0, 1, 250000, tzinfo=timezone.utc)
        store = SQLiteRecordStore(tmp_path / "clock.db", clock=lambda: moment)
        try:
            assert store.insert(make_sample()).created_at == moment
        finally:
            store.close()

    def test_legacy_rows_without_scores_or_offset(self, tmp_path) -> None:
        """Rows written by older deployments: naive timestamps, NULL scores."""
        path = tmp_path / "legacy.db"
        SQLiteRecordStore(path).close()
        conn = sqlite3.connect(path)
        with conn:
            conn.execute(
                "INSERT INTO generations (value, observed_at, created_at) VALUES (?, ?, ?)",
                ("ab" * 16, "2025-01-01T00:00:00", "2025-01-01T00:00:01"),
            )
        conn.close()

        store = SQLiteRecordStore(path)
        try:
            latest = store.find_latest_by_observed_at()
            assert latest.entropy is None
            assert latest.chi_squared is None
            assert latest.is_anomaly is False
            assert latest.observed_at.tzinfo is not None
            assert store.aggregate().avg_entropy is None
        finally:
            store.close()

    def test_legacy_timestamp_forms_are_normalised_on_open(self, tmp_path, make_sample) -> None:
        """Space-separated and ``Z``-suffixed text is rewritten so text order is time order."""
        path = tmp_path / "legacy-forms.db"
        store = SQLiteRecordStore(path)
        canonical = store.insert(make_sample(minutes=0)).value  # 2026-10-18 12:00 UTC
        store.close()
        conn = sqlite3.connect(path)
        with conn:
            conn.executemany(
                "INSERT INTO generations (value, observed_at, created_at) VALUES (?, ?, ?)",
                [
                    ("aa" * 16, "2026-10-18 23:00:00", "2026-10-18 23:00:01"),
                    ("bb" * 16, "2026-10-18T12:30:00Z", "2026-10-18T12:30:01Z"),
                    ("cc" * 16, "2026-10-19 00:05:00", "2026-10-19 00:05:01"),
                ],
            )
        conn.close()

        store = SQLiteRecordStore(path)
        try:
            page = store.find_page(limit=10, offset=0)
            assert [s.value for s in page.items] == ["cc" * 16, "aa" * 16, "bb" * 16, canonical]
            assert store.find_latest_by_observed_at().value == "cc" * 16

            days = store.aggregate_by_day(timezone.utc)
            assert [(d.day, d.count) for d in days] == [
                (date(2026, 10, 18), 3),
                (date(2026, 10, 19), 1),
            ]
        finally:
            store.close()

        conn = sqlite3.connect(path)
        stored = conn.execute("SELECT observed_at, created_at FROM generations ORDER BY id").fetchall()
        conn.close()
        assert stored[1] == (
            "2026-10-18T23:00:00.000000+00:00",
            "2026-10-18T23:00:01.000000+00:00",
        )
        assert stored[2][0] == "2026-10-18T12:30:00.000000+00:00"
        assert all(len(text) == 32 for row in stored for text in row)

    @pytest.mark.parametrize("tz", [timezone.utc, ZoneInfo("UTC"), ZoneInfo("Etc/UTC")])
    def test_sql_day_rollup_matches_python_rollup(self, sqlite_store, make_sample, tz) -> None:
        samples = [
            make_sample(minutes=m, anomaly=(i % 4 == 0))
            for i, m in enumerate(range(-700, 3 * 1440, 211))
        ]
        samples.append(make_sample(minutes=5, entropy=None, chi_squared=None))
        for sample in samples:
            sqlite_store.insert(sample)

        expected = rollup_by_day(samples, timezone.utc)
        actual = sqlite_store.aggregate_by_day(tz)
        assert [(d.day, d.count, d.anomaly_count) for d in actual] == [
            (d.day, d.count, d.anomaly_count) for d in expected
        ]
        for got, want in zip(actual, expected):
            assert got.avg_entropy == pytest.approx(want.avg_entropy)
            assert got.avg_chi_squared == pytest.approx(want.avg_chi_squared)

    def test_zoned_day_rollup_matches_memory_store(self, sqlite_store, make_sample) -> None:
        memory = InMemoryRecordStore()
        for minutes in range(-900, 2 * 1440, 173):
            sample = make_sample(minutes=minutes, anomaly=(minutes % 2 == 0))
            sqlite_store.insert(sample)
            memory.insert(sample)

        los_angeles = ZoneInfo("America/Los_Angeles")
        assert sqlite_store.aggregate_by_day(los_angeles) == memory.aggregate_by_day(los_angeles)

    def test_operations_after_close_raise_storage_error(self, tmp_path, make_sample) -> None:
        store = SQLiteRecordStore(tmp_path / "closed.db")
        store.close()
        with pytest.raises(StorageError, match="insert generation"):
            store.insert(make_sample())
        with pytest.raises(StorageError):
            store.aggregate()

    def test_health_check_reports_failure(self, tmp_path) -> None:
        store = SQLiteRecordStore(tmp_path / "health.db")
        assert store.health_check()["healthy"] is True
        store.close()
        assert store.health_check()["healthy"] is False

    def test_unopenable_path_raises_storage_error(self, tmp_path) -> None:
        with pytest.raises(StorageError, match="Failed to open"):
            SQLiteRecordStore(tmp_path / "missing-dir" / "x.db")

    def test_in_memory_database(self, make_sample) -> None:
        store = SQLiteRecordStore(":memory:")
        try:
            store.insert(make_sample())
            assert store.aggregate().count == 1
        finally:
            store.close()


class TestBuildRecordStore:
    """Tests for the config-driven backend factory."""

    def test_memory(self) -> None:
        config = MonitorConfig(_env_file=None, store_backend="memory")  # type: ignore[call-arg]
        assert isinstance(build_record_store(config), InMemoryRecordStore)

    def test_sqlite(self, tmp_path) -> None:
        config = MonitorConfig(  # type: ignore[call-arg]
            _env_file=None,
            store_backend="sqlite",
            database_path=str(tmp_path / "built.db"),
        )
        store = build_record_store(config)
        try:
            assert isinstance(store, SQLiteRecordStore)
        finally:
            store.close()

    def test_unknown_backend(self) -> None:
        config = MonitorConfig(_env_file=None, store_backend="postgres")  # type: ignore[call-arg]
        with pytest.raises(ValueError, match="postgres"):
            build_record_store(config)
