import json
import logging
from unittest.mock import patch

from billdesk.logging import TEXT_FORMAT, configure_logging, reconfigure


class TestConfigureLogging:
    def test_text_format(self):
        with patch("billdesk.logging.settings") as mock_settings:
            mock_settings.log_level = "DEBUG"
            mock_settings.log_json = False
            configure_logging()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == TEXT_FORMAT

    def test_json_format(self):
        with patch("billdesk.logging.settings") as mock_settings:
            mock_settings.log_level = "INFO"
            mock_settings.log_json = True
            configure_logging()

        from pythonjsonlogger.json import JsonFormatter

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

        record = logging.LogRecord("billdesk.test", logging.INFO, __file__, 1, "hello", None, None)
        payload = json.loads(root.handlers[0].formatter.format(record))
        assert payload["message"] == "hello"
        assert payload["level"] == "INFO"
        assert payload["service"] == "billdesk"

    def test_unknown_level_falls_back_to_info(self):
        with patch("billdesk.logging.settings") as mock_settings:
            mock_settings.log_level = "chatty"
            mock_settings.log_json = False
            reconfigure()
        assert logging.getLogger().level == logging.INFO

    def test_quiets_uvicorn_access(self):
        configure_logging()
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
