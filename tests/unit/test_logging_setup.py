# Assumptions:
# - Log output is captured through an injected sink, never by redirecting stderr
# - setup_logging is restored to structlog defaults after each test

import io
import json
import logging

import pytest
import structlog

from retryhttp.logging import (
    build_logger,
    fatal,
    new_test_logger,
    resolve_logging_config,
    setup_logging,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_HANDLER", raising=False)


@pytest.fixture
def restore_logging():
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
    structlog.reset_defaults()


class TestResolveLoggingConfig:
    """Test level and handler resolution"""

    def test_defaults(self):
        config = resolve_logging_config()

        assert config.level == "info"
        assert config.handler == "json"
        assert config.level_no == logging.INFO

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARN")
        monkeypatch.setenv("LOG_HANDLER", "text")

        config = resolve_logging_config()

        assert config.level == "warn"
        assert config.handler == "text"
        assert config.level_no == logging.WARNING

    def test_invalid_values_fall_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = resolve_logging_config("verbose", "xml")

        assert config.level == "info"
        assert config.handler == "json"
        assert "Invalid LOG_LEVEL" in caplog.text
        assert "Invalid LOG_HANDLER" in caplog.text


class TestTestLogger:
    """Test the in-memory logger used by tests"""

    def test_json_messages(self):
        logger, read_messages = new_test_logger("debug", "json")

        logger.info("first message", attempt=1)
        logger.debug("second message")

        assert read_messages() == ["first message", "second message"]

    def test_text_messages(self):
        logger, read_messages = new_test_logger("debug", "text")

        logger.warning("HTTP request failed, retrying", attempt=2)
        logger.error("quoted \"value\" inside")
        logger.info("single")

        assert read_messages() == ["HTTP request failed, retrying", 'quoted "value" inside', "single"]

    def test_level_filters_messages(self):
        logger, read_messages = new_test_logger("error", "json")

        logger.info("ignored")
        logger.error("kept")

        assert read_messages() == ["kept"]

    def test_fatal_logs_and_exits(self):
        logger, read_messages = new_test_logger("info", "json")

        with pytest.raises(SystemExit) as exc_info:
            fatal(logger, "cannot continue", reason="test")

        assert exc_info.value.code == 1
        assert read_messages() == ["cannot continue"]

    def test_build_logger_writes_to_sink(self):
        sink = io.StringIO()
        logger = build_logger("info", "json", sink)

        logger.info("hello", key="value")

        entry = json.loads(sink.getvalue())
        assert entry["event"] == "hello"
        assert entry["key"] == "value"
        assert entry["level"] == "info"


class TestSetupLogging:
    """Test process-wide logging setup"""

    def test_json_output(self, restore_logging):
        stream = io.StringIO()

        config = setup_logging("debug", "json", stream=stream)
        structlog.get_logger("retryhttp.test").info("configured", attempt=1)

        assert config.handler == "json"
        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["message"] == "configured"
        assert entry["attempt"] == 1
        assert entry["levelname"] == "INFO"

    def test_text_output(self, restore_logging):
        stream = io.StringIO()

        config = setup_logging("info", "text", stream=stream)
        structlog.get_logger("retryhttp.test").info("configured", attempt=1)
        structlog.get_logger("retryhttp.test").debug("filtered")

        assert config.level == "info"
        output = stream.getvalue()
        assert "event=configured" in output
        assert "attempt=1" in output
        assert "filtered" not in output
