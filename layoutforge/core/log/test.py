"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "layoutforge"

    @pytest.mark.unit
    def test_setup_logging_accepts_level_name(self) -> None:
        """String level names are accepted."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")

        # basicConfig is a no-op when pytest already configured the root logger
        assert logger.level == logging.NOTSET

    @pytest.mark.unit
    def test_setup_logging_reads_environment(self, monkeypatch) -> None:
        """LOG_LEVEL is used when no level is passed."""
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        setup_logging(stream=StringIO())

    @pytest.mark.unit
    def test_setup_logging_unknown_level_name(self) -> None:
        """Unknown level names do not raise."""
        setup_logging(level="chatty", stream=StringIO())
