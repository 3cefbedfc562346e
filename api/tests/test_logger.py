"""Unit tests for core.logger module.

Tests the structlog configuration:
- configure_logging() installs a single stdout handler on the root logger
- JSON output when LOG_FORMAT=json
- LOG_LEVEL controls the root level
- Noisy third-party loggers are quieted
"""

import json
import logging

import pytest
import structlog

from core.logger import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _clean_root_logger():
    """Save and restore root logger and structlog state around each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    structlog.reset_defaults()


@pytest.mark.unit
class TestConfigureLogging:
    def test_installs_single_handler(self):
        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        configure_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_unknown_level_defaults_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_quiets_third_party_loggers(self):
        configure_logging()

        for name in ("httpx", "httpcore", "uvicorn.access", "stripe"):
            assert logging.getLogger(name).level == logging.WARNING

    def test_json_output(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        configure_logging()

        get_logger("tests.logger").info(
            "certificate.rendered", style="classic", size_bytes=1024
        )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        parsed = json.loads(line)
        assert parsed["event"] == "certificate.rendered"
        assert parsed["style"] == "classic"
        assert parsed["size_bytes"] == 1024
        assert parsed["level"] == "info"
        assert parsed["logger"] == "tests.logger"
        assert "timestamp" in parsed

    def test_stdlib_logs_share_format(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_FORMAT", "json")
        configure_logging()

        logging.getLogger("uvicorn.error").warning("port in use")

        parsed = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert parsed["event"] == "port in use"
        assert parsed["level"] == "warning"
