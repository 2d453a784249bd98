# ABOUTME: Test cases for structured logging infrastructure with request ID tracking
# ABOUTME: Validates logging configuration, JSON output, and request ID context binding

import json
import logging

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration around each test."""
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    logging.getLogger().handlers.clear()


def _read_entries(path):
    for handler in logging.getLogger().handlers:
        handler.flush()
    lines = [line for line in path.read_text().splitlines() if line]
    return [json.loads(line) for line in lines]


class TestLoggingConfiguration:

    def test_configure_logging_with_defaults(self):
        from music_gateway.logging_config import configure_logging

        configure_logging()

        logger = structlog.get_logger("test")
        logger.info("test message", key="value")
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_with_custom_level(self):
        from music_gateway.logging_config import configure_logging

        configure_logging(log_level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_json_output_format(self, tmp_path):
        from music_gateway.logging_config import configure_logging

        log_file = tmp_path / "gateway.log"
        configure_logging(log_file=str(log_file))

        structlog.get_logger("test").info("upstream_retry", attempt=1, delay_ms=1200)

        entry = _read_entries(log_file)[-1]
        assert entry["event"] == "upstream_retry"
        assert entry["attempt"] == 1
        assert entry["delay_ms"] == 1200
        assert entry["level"] == "info"
        assert entry["logger"] == "test"
        assert "timestamp" in entry

    def test_level_filtering(self, tmp_path):
        from music_gateway.logging_config import configure_logging

        log_file = tmp_path / "gateway.log"
        configure_logging(log_level="warning", log_file=str(log_file))

        logger = structlog.get_logger("test")
        logger.info("hidden")
        logger.warning("shown")

        events = [entry["event"] for entry in _read_entries(log_file)]
        assert events == ["shown"]

    def test_console_renderer(self, tmp_path):
        from music_gateway.logging_config import configure_logging

        log_file = tmp_path / "gateway.log"
        configure_logging(log_file=str(log_file), enable_json=False)

        structlog.get_logger("test").info("pacing_wait", wait_ms=1500)
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "pacing_wait" in content
        assert "wait_ms" in content

    def test_request_id_context(self, tmp_path):
        from music_gateway.logging_config import configure_logging, request_id_context

        log_file = tmp_path / "gateway.log"
        configure_logging(log_file=str(log_file))
        logger = structlog.get_logger("test")

        with request_id_context("req-42"):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _read_entries(log_file)[-2:]
        assert inside["request_id"] == "req-42"
        assert "request_id" not in outside

    def test_get_logger(self):
        from music_gateway.logging_config import get_logger

        logger = get_logger("music_gateway.test")
        assert logger is not None
        assert hasattr(logger, "info")
