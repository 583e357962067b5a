"""Tests for GenerationLogger and sample_to_record()."""

from __future__ import annotations

import json
import logging

import pytest

from rng_monitor.config import MonitorConfig
from rng_monitor.logging.logger import GenerationLogger, sample_to_record


def _config(level: str) -> MonitorConfig:
    return MonitorConfig(_env_file=None, log_level=level)  # type: ignore[call-arg]


class TestSampleToRecord:
    """Tests for flattening Samples into JSON-safe dicts."""

    def test_timestamps_are_iso(self, make_sample) -> None:
        record = sample_to_record(make_sample(id=7))
        assert record["observed_at"] == "2026-10-18T12:00:00+00:00"
        assert record["created_at"] is None
        assert record["id"] == 7
        json.dumps(record)


class TestLogLevels:
    """Output per verbosity level."""

    def test_none_emits_nothing(self, make_sample, caplog) -> None:
        gen_logger = GenerationLogger(_config("none"))
        with caplog.at_level(logging.DEBUG, logger="rng_monitor"):
            gen_logger.log_generation(make_sample(anomaly=True))
        assert caplog.records == []
        assert gen_logger.generations_logged == 1

    def test_summary_normal_is_info(self, make_sample, caplog) -> None:
        gen_logger = GenerationLogger(_config("summary"))
        with caplog.at_level(logging.DEBUG, logger="rng_monitor"):
            gen_logger.log_generation(make_sample(id=3))
        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelno == logging.INFO
        message = record.getMessage()
        assert "value=00001111445566778899aabbccddeeff" in message
        assert "entropy=3.750" in message
        assert "chi_squared=8.000" in message
        assert "id=3" in message
        assert "[ANOMALY]" not in message

    def test_summary_anomaly_is_warning(self, make_sample, caplog) -> None:
        gen_logger = GenerationLogger(_config("summary"))
        with caplog.at_level(logging.DEBUG, logger="rng_monitor"):
            gen_logger.log_generation(make_sample(anomaly=True))
        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.getMessage().endswith("[ANOMALY]")

    def test_summary_tolerates_missing_scores(self, make_sample, caplog) -> None:
        gen_logger = GenerationLogger(_config("summary"))
        with caplog.at_level(logging.INFO, logger="rng_monitor"):
            gen_logger.log_generation(make_sample(entropy=None, chi_squared=None))
        assert "entropy=nan" in caplog.records[0].getMessage()

    def test_full_dumps_json(self, make_sample, caplog) -> None:
        gen_logger = GenerationLogger(_config("full"))
        with caplog.at_level(logging.INFO, logger="rng_monitor"):
            gen_logger.log_generation(make_sample(id=11))
        message = caplog.records[0].getMessage()
        assert message.startswith("generation_record: ")
        payload = json.loads(message.removeprefix("generation_record: "))
        assert payload["id"] == 11
        assert payload["chi_squared"] == pytest.approx(8.0)
        assert payload["is_anomaly"] is False


class TestCounters:
    """Running counts are kept at every level."""

    @pytest.mark.parametrize("level", ["none", "summary", "full"])
    def test_counts(self, level, make_sample) -> None:
        gen_logger = GenerationLogger(_config(level))
        for anomaly in (False, True, False, True, True):
            gen_logger.log_generation(make_sample(anomaly=anomaly))
        assert gen_logger.generations_logged == 5
        assert gen_logger.anomalies_logged == 3
