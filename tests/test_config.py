"""Tests for rng_monitor.config.

Covers:
- Default values
- Environment variable loading (RNG_* via monkeypatch)
- Init kwargs override the environment
- validate_config rejects each kind of invalid setting
- resolve_timezone
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from rng_monitor.config import MonitorConfig, resolve_timezone, validate_config
from rng_monitor.exceptions import ConfigValidationError, RngMonitorError


def _config(**kwargs: object) -> MonitorConfig:
    return MonitorConfig(_env_file=None, **kwargs)  # type: ignore[call-arg]


class TestMonitorConfigDefaults:
    """Verify default values."""

    def test_storage_defaults(self) -> None:
        cfg = _config()
        assert cfg.store_backend == "sqlite"
        assert cfg.database_path == "rng_monitor.db"
        assert cfg.store_timeout_s == 5.0

    def test_generation_defaults(self) -> None:
        cfg = _config()
        assert cfg.entropy_source_type == "system"
        assert cfg.tick_interval_s == 60
        assert cfg.run_on_start is True
        assert cfg.scheduler_enabled is True

    def test_http_defaults(self) -> None:
        cfg = _config()
        assert cfg.api_prefix == "/api"
        assert cfg.cors_origins == ["*"]
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 3000

    def test_misc_defaults(self) -> None:
        cfg = _config()
        assert cfg.chart_timezone == "UTC"
        assert cfg.log_level == "summary"

    def test_defaults_validate(self) -> None:
        validate_config(_config())


class TestEnvironmentLoading:
    """Settings come from RNG_* environment variables."""

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("RNG_STORE_BACKEND", "memory")
        monkeypatch.setenv("RNG_PORT", "8080")
        monkeypatch.setenv("RNG_SCHEDULER_ENABLED", "false")
        monkeypatch.setenv("RNG_CHART_TIMEZONE", "Europe/Berlin")
        cfg = _config()
        assert cfg.store_backend == "memory"
        assert cfg.port == 8080
        assert cfg.scheduler_enabled is False
        assert cfg.chart_timezone == "Europe/Berlin"

    def test_list_from_json(self, monkeypatch) -> None:
        monkeypatch.setenv("RNG_CORS_ORIGINS", '["http://localhost:5173"]')
        assert _config().cors_origins == ["http://localhost:5173"]

    def test_kwargs_beat_env(self, monkeypatch) -> None:
        monkeypatch.setenv("RNG_PORT", "8080")
        assert _config(port=9000).port == 9000

    def test_unprefixed_vars_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("PORT", "1234")
        assert _config().port == 3000


class TestValidateConfig:
    """validate_config raises ConfigValidationError on bad settings."""

    @pytest.mark.parametrize(
        ("kwargs", "match"),
        [
            ({"store_backend": "postgres"}, "store backend"),
            ({"log_level": "verbose"}, "log level"),
            ({"tick_interval_s": 0}, "positive"),
            ({"tick_interval_s": -60}, "positive"),
            ({"tick_interval_s": 7}, "divide"),
            ({"store_timeout_s": 0.0}, "store_timeout_s"),
            ({"api_prefix": "api"}, "api_prefix"),
            ({"api_prefix": "/api/"}, "api_prefix"),
            ({"chart_timezone": "Mars/Olympus_Mons"}, "time zone"),
        ],
    )
    def test_rejects(self, kwargs, match) -> None:
        with pytest.raises(ConfigValidationError, match=match):
            validate_config(_config(**kwargs))

    @pytest.mark.parametrize("interval", [1, 30, 60, 300, 3600, 86400])
    def test_accepts_day_divisors(self, interval) -> None:
        validate_config(_config(tick_interval_s=interval))

    def test_empty_prefix_allowed(self) -> None:
        validate_config(_config(api_prefix=""))

    def test_error_hierarchy(self) -> None:
        assert issubclass(ConfigValidationError, RngMonitorError)


class TestResolveTimezone:
    """Tests for IANA zone lookup."""

    def test_utc(self) -> None:
        tz = resolve_timezone("UTC")
        moment = datetime(2026, 10, 18, 12, tzinfo=timezone.utc)
        assert moment.astimezone(tz).utcoffset().total_seconds() == 0

    def test_named_zone(self) -> None:
        tz = resolve_timezone("Asia/Tokyo")
        moment = datetime(2026, 10, 18, 12, tzinfo=timezone.utc)
        assert moment.astimezone(tz).hour == 21

    @pytest.mark.parametrize("name", ["Nowhere/City", "../etc/passwd"])
    def test_unknown_raises(self, name) -> None:
        with pytest.raises(ConfigValidationError):
            resolve_timezone(name)
