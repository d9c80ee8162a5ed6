"""
Unit tests for configuration, reporting helpers, the access log and
logging setup.
"""

import json
import logging

import pytest

from perflab.access_log import ExchangeLog, log_exchange
from perflab.config import DemoConfig
from perflab.logging_setup import JSONFormatter, setup_logging
from perflab.report import ExchangeResult, format_bytes, savings_percent


class TestDemoConfig:
    """Tests for DemoConfig."""

    def test_defaults(self):
        """Defaults match the classroom setup."""
        config = DemoConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8888
        assert config.buffer_size == 64 * 1024
        assert config.header_mode == 0
        assert config.payload_mode == 4
        assert config.user_count == 100
        config.validate()

    def test_from_env(self, monkeypatch):
        """PERFLAB_* variables are read."""
        monkeypatch.setenv("PERFLAB_PORT", "9000")
        monkeypatch.setenv("PERFLAB_HEADER_MODE", "2")
        monkeypatch.setenv("PERFLAB_LOG_FORMAT", "json")
        config = DemoConfig.from_env()
        assert config.port == 9000
        assert config.header_mode == 2
        assert config.log_format == "json"

    def test_overrides_ignore_none(self):
        """None overrides keep the existing value."""
        config = DemoConfig(port=9000).with_overrides(port=None, header_mode=3)
        assert config.port == 9000
        assert config.header_mode == 3

    @pytest.mark.parametrize("changes", [
        {"port": 70000},
        {"header_mode": 4},
        {"payload_mode": 5},
        {"user_count": 0},
        {"timeout": 0},
        {"buffer_size": 10},
        {"log_format": "xml"},
    ])
    def test_validate_rejects(self, changes):
        """Out-of-range values fail validation."""
        with pytest.raises(ValueError):
            DemoConfig(**changes).validate()


class TestReportHelpers:
    """Tests for size formatting and savings."""

    def test_format_bytes(self):
        """Bytes, kilobytes and megabytes."""
        assert format_bytes(512) == "512 B"
        assert format_bytes(2048) == "2.00 KB"
        assert format_bytes(3 * 1024 * 1024) == "3.00 MB"

    def test_savings_percent(self):
        """Savings relative to a baseline."""
        assert savings_percent(200, 50) == 75.0
        assert savings_percent(0, 10) == 0.0

    def test_exchange_result(self):
        """Totals and summary text."""
        result = ExchangeResult("FULL", 100, 80, 300, 200, 200, 0.001)
        assert result.total_bytes == 400
        assert "[FULL] status=200" in result.summary()


class TestAccessLog:
    """Tests for the per-exchange access log."""

    def _entry(self):
        return ExchangeLog(
            peer="127.0.0.1:5000",
            request="GET /api/users HTTP/1.1",
            mode="FULL",
            status=200,
            bytes_received=100,
            bytes_sent=900,
            duration_ms=1.234,
            timestamp="27/Jan/2025:12:00:00 +0000",
        )

    def test_text(self):
        """Text lines carry request, status and byte counts."""
        line = self._entry().to_text()
        assert '"GET /api/users HTTP/1.1"' in line
        assert "mode=FULL 200 rx=100 tx=900 1.23ms" in line

    def test_record_carries_fields(self, caplog):
        """The record message is the text line; the fields ride along as a dict."""
        with caplog.at_level(logging.INFO, logger="perflab.access"):
            log_exchange(self._entry())
        record = caplog.records[-1]
        assert record.getMessage() == self._entry().to_text()
        assert record.access["status"] == 200
        assert record.access["duration_ms"] == 1.23

    def test_json_line_is_encoded_once(self, caplog):
        """Under the JSON formatter the access fields are an object, not a string."""
        with caplog.at_level(logging.INFO, logger="perflab.access"):
            log_exchange(self._entry())
        line = JSONFormatter().format(caplog.records[-1])
        entry = json.loads(line)
        assert entry["logger"] == "perflab.access"
        assert isinstance(entry["access"], dict)
        assert entry["access"]["mode"] == "FULL"
        assert entry["access"]["bytes_sent"] == 900
        assert entry["message"] == self._entry().to_text()


class TestLoggingSetup:
    """Tests for setup_logging."""

    def test_sets_level(self):
        """The perflab logger gets the requested level."""
        setup_logging("WARNING")
        assert logging.getLogger("perflab").level == logging.WARNING

    def test_json_formatter(self):
        """Records render as JSON objects."""
        record = logging.LogRecord("perflab.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "hello x"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "perflab.test"
