"""Tests for logging setup."""

import json
import logging

import pytest

from pod_netstat.utils.logging import JsonFormatter, resolve_level, setup_logging


class TestLogging:
    def test_resolve_level(self):
        assert resolve_level("info") == logging.INFO
        assert resolve_level("WARNING") == logging.WARNING
        assert resolve_level("trace") == logging.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging(level="loud")

    def test_json_formatter(self):
        record = logging.LogRecord(
            "pod_netstat", logging.WARNING, __file__, 1, "pod %s", ("a",), None
        )
        record.created = 0.0
        entry = json.loads(JsonFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["message"] == "pod a"
        assert entry["time"] == "1970-01-01T00:00:00+00:00"

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "exporter.log"
        setup_logging(level="debug", log_file=log_file, rich_console=False)
        logging.getLogger("pod_netstat.test").debug("written")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written" in log_file.read_text()
