"""
Unit tests for configuration loading, logging and timestamp helpers.
"""

import json
import logging
from datetime import date, datetime, timedelta, timezone

import pytest
import yaml

from shiptrack.common.config_loader import ConfigLoader, get_config
from shiptrack.common.logging_utils import JSONFormatter, get_logger
from shiptrack.common.timeutils import format_timestamp, parse_timestamp


@pytest.fixture
def config_dir(tmp_path):
    """Create a temporary config directory with base and env overrides."""
    directory = tmp_path / "config"
    directory.mkdir()

    base = {
        "log_level": "INFO",
        "storage": {"backend": "json", "path": "${TEST_STORE_PATH:-data/default.json}"},
        "routing": {"api_key": "${TEST_ORS_KEY}", "timeout_seconds": 5},
        "analytics": {"recent_window_days": 30},
    }
    staging = {
        "log_level": "WARNING",
        "analytics": {"max_delivery_hours": 240},
    }
    (directory / "base.yaml").write_text(yaml.dump(base))
    (directory / "staging.yaml").write_text(yaml.dump(staging))
    return directory


class TestConfigLoader:
    """Tests for YAML merging and environment substitution."""

    def test_environment_overrides_base(self, config_dir, monkeypatch):
        """Test that the environment file is deep-merged over base."""
        monkeypatch.delenv("TEST_STORE_PATH", raising=False)

        config = ConfigLoader(config_dir).load("staging")

        assert config.environment == "staging"
        assert config.log_level == "WARNING"
        assert config.analytics.recent_window_days == 30
        assert config.analytics.max_delivery_hours == 240
        assert config.storage.path == "data/default.json"
        assert config.routing.timeout_seconds == 5

    def test_env_var_substitution(self, config_dir, monkeypatch):
        """Test that ${VAR} references resolve from the environment."""
        monkeypatch.setenv("TEST_STORE_PATH", "/tmp/elsewhere.json")
        monkeypatch.setenv("TEST_ORS_KEY", "secret")

        config = ConfigLoader(config_dir).load("staging")

        assert config.storage.path == "/tmp/elsewhere.json"
        assert config.routing.api_key == "secret"

    def test_missing_environment_file(self, config_dir):
        """Test that an unknown environment falls back to base alone."""
        config = ConfigLoader(config_dir).load("qa")

        assert config.log_level == "INFO"
        assert config.api.prefix == "/api"

    def test_repository_test_config(self):
        """Test that the bundled test environment uses the memory backend."""
        config = get_config("test")

        assert config.storage.backend == "memory"
        assert config.routing.default_profile == "driving-car"
        assert config.analytics.max_delivery_hours == 720

    def test_get_config_with_directory(self, config_dir):
        """Test that an explicit directory replaces the cached loader."""
        config = get_config("staging", config_dir=config_dir)

        assert config.log_level == "WARNING"
        get_config("test", config_dir=ConfigLoader().config_dir)


class TestStructuredLogging:
    """Tests for JSON log output with keyword context."""

    def test_context_in_json_output(self):
        """Test that keyword arguments land in the JSON payload."""
        logger = get_logger("shiptrack.tests.logging")
        logger.setLevel(logging.INFO)
        records = []

        class Capture(logging.Handler):
            def emit(self, record):
                records.append(record)

        handler = Capture()
        logger.addHandler(handler)
        try:
            logger.info("Shipment dispatched", shipment_id="S1")
        finally:
            logger.removeHandler(handler)

        payload = json.loads(JSONFormatter(service_name="shiptrack").format(records[0]))
        assert payload["message"] == "Shipment dispatched"
        assert payload["shipment_id"] == "S1"
        assert payload["service"] == "shiptrack"


class TestTimestamps:
    """Tests for timestamp formatting and parsing."""

    def test_format_uses_millis_and_z(self):
        """Test the stored timestamp format."""
        moment = datetime(2024, 1, 1, 8, 30, 5, 123456, tzinfo=timezone.utc)

        assert format_timestamp(moment) == "2024-01-01T08:30:05.123Z"

    def test_format_converts_to_utc(self):
        """Test that offsets are normalized to UTC."""
        moment = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))

        assert format_timestamp(moment) == "2024-01-01T08:30:00.000Z"

    @pytest.mark.parametrize("value,expected", [
        ("2024-01-01T00:00:00.000Z", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("2024-01-01", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        (date(2024, 1, 1), datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ("not a date", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, value, expected):
        """Test lenient parsing of stored instants."""
        assert parse_timestamp(value) == expected
