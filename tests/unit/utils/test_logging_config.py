"""Unit tests for logging configuration utilities."""

import sys

import pytest
from loguru import logger

from listing_qa.config.schemas import LoggingConfig
from listing_qa.utils.logging_config import (
    LogContext,
    configure_logging_from_config,
    setup_logging,
)


pytestmark = pytest.mark.fast


@pytest.fixture(autouse=True)
def restore_test_sink():
    """Put the test suite's stderr sink back after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="INFO", format="{time:YYYY-MM-DD HH:mm:ss} {level} {name}: {message}")


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_with_file(self, tmp_path):
        """Test setup_logging writes to a file sink."""
        log_file = tmp_path / "logs" / "engine.log"

        setup_logging(level="INFO", file_path=str(log_file))
        logger.info("file sink check")
        logger.remove()

        assert "file sink check" in log_file.read_text(encoding="utf-8")

    def test_setup_logging_invalid_level(self, capsys):
        """Test setup_logging falls back to INFO for unknown levels."""
        setup_logging(level="INVALID_LEVEL", include_timestamps=False)

        assert "falling back to 'INFO'" in capsys.readouterr().out

    def test_unbound_records_render(self, capsys):
        """Test that records without a bound stage still format."""
        setup_logging(level="INFO", include_timestamps=False)
        logger.info("plain message")

        assert "plain message" in capsys.readouterr().out

    def test_configure_from_config(self, tmp_path):
        """Test configuring from a LoggingConfig section."""
        log_file = tmp_path / "engine.log"
        configure_logging_from_config(LoggingConfig(level="debug", file_path=str(log_file)))
        logger.debug("debug line")
        logger.remove()

        assert "debug line" in log_file.read_text(encoding="utf-8")


class TestLogContext:
    """Tests for LogContext."""

    def test_binds_stage_and_run_id(self):
        """Test that the bound logger carries stage and run id."""
        records = []
        handler_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            with LogContext(stage="validation", run_id="u-1") as run_logger:
                run_logger.info("inside")
        finally:
            logger.remove(handler_id)

        assert records[0]["extra"]["stage"] == "validation"
        assert records[0]["extra"]["run_id"] == "u-1"

    def test_global_logger_stays_unbound(self):
        """Test that binding inside the context leaves the global logger untouched."""
        records = []
        handler_id = logger.add(lambda message: records.append(message.record), level="INFO")
        try:
            with LogContext(stage="persist", run_id="u-2"):
                logger.info("global")
        finally:
            logger.remove(handler_id)

        assert records[0]["extra"].get("run_id") != "u-2"

    def test_without_context_returns_logger(self):
        """Test that an empty context returns the global logger."""
        with LogContext() as run_logger:
            assert run_logger is logger
