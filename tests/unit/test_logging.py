"""
Tests for logging setup.
"""

import json
import logging
import sys

from rich.logging import RichHandler

from recorder_studio.utils.logging import JsonLineFormatter, setup_logging


class TestSetupLogging:
    """Test root logger configuration."""

    def test_rich_console_handler(self):
        setup_logging("debug")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(handler, RichHandler) for handler in root.handlers)

    def test_noisy_loggers_quieted(self):
        setup_logging("DEBUG")

        assert logging.getLogger("websockets").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO

    def test_json_log_file(self, tmp_path):
        log_file = tmp_path / "studio.log"
        setup_logging("INFO", log_file=str(log_file), json_format=True)

        logging.getLogger("recorder_studio.test").info('Saved record "login"')
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert entry["level"] == "INFO"
        assert entry["message"] == 'Saved record "login"'


class TestJsonLineFormatter:
    """Test JSON formatting."""

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, None)
            record.exc_info = sys.exc_info()

        data = json.loads(JsonLineFormatter().format(record))

        assert data["message"] == "failed"
        assert "ValueError: boom" in data["exception"]
