"""Tests for logging setup."""

import logging

import pytest
from structlog.testing import capture_logs

from catalog_explorer.logger import get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(level="verbose")

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown log format"):
            setup_logging(fmt="xml")

    def test_level_override(self) -> None:
        """Test an explicit level wins over settings and is case-insensitive."""
        setup_logging(level="debug", fmt="json")

        assert logging.getLogger().level == logging.DEBUG

        setup_logging()


class TestGetLogger:
    """Tests for get_logger()."""

    def test_initial_context_bound(self) -> None:
        """Test initial context is attached to every event."""
        with capture_logs() as logs:
            get_logger(__name__, component="taxonomy").info("Overrides merged", characters=3)

        assert logs == [
            {
                "event": "Overrides merged",
                "log_level": "info",
                "component": "taxonomy",
                "characters": 3,
            }
        ]
