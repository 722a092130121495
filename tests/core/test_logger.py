"""
Test suite for logger configuration and Sentry integration.

Run tests:
    pytest tests/core/test_logger.py -v

Run with coverage:
    pytest tests/core/test_logger.py --cov=app.core.logger --cov-report=term-missing -v
"""

import logging
import logging.handlers
import os
import shutil
import tempfile
import uuid
from unittest.mock import MagicMock, patch

import pytest

from app.core.logger import LOG_FORMAT, init_sentry, setup_logger


@pytest.fixture(autouse=True)
def reset_sentry_state():
    """Reset Sentry initialization state before each test."""
    import app.core.logger as logger_module

    logger_module._sentry_initialized = False
    yield
    logger_module._sentry_initialized = False


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for log files."""
    tmpdir = tempfile.mkdtemp()
    yield tmpdir
    logging.shutdown()
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def logger_name():
    """Unique logger name so handlers from other tests never leak in."""
    name = f"test_logger_{uuid.uuid4().hex}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _sentry_modules(mock_sentry: MagicMock) -> dict:
    return {
        "sentry_sdk": mock_sentry,
        "sentry_sdk.integrations.logging": MagicMock(LoggingIntegration=MagicMock()),
        "sentry_sdk.integrations.asyncio": MagicMock(AsyncioIntegration=MagicMock()),
    }


class TestInitSentry:
    """Test suite for init_sentry function."""

    def test_init_sentry_with_valid_dsn(self):
        mock_sentry = MagicMock()

        with patch.dict("sys.modules", _sentry_modules(mock_sentry)):
            result = init_sentry(
                dsn="https://test@sentry.io/123",
                environment="production",
                traces_sample_rate=0.5,
            )

        assert result is True
        mock_sentry.init.assert_called_once()
        call_kwargs = mock_sentry.init.call_args.kwargs
        assert call_kwargs["dsn"] == "https://test@sentry.io/123"
        assert call_kwargs["environment"] == "production"
        assert call_kwargs["traces_sample_rate"] == 0.5

    def test_init_sentry_already_initialized(self):
        import app.core.logger as logger_module

        logger_module._sentry_initialized = True

        assert init_sentry(dsn="https://test@sentry.io/123") is False

    def test_init_sentry_empty_dsn(self):
        """An empty DSN disables Sentry."""
        assert init_sentry(dsn="") is False

    def test_init_sentry_sets_global_flag(self):
        import app.core.logger as logger_module

        with patch.dict("sys.modules", _sentry_modules(MagicMock())):
            init_sentry(dsn="https://test@sentry.io/123")

        assert logger_module._sentry_initialized is True


class TestSetupLogger:
    """Test suite for setup_logger function."""

    def test_setup_logger_basic(self, temp_log_dir, logger_name):
        log_file = os.path.join(temp_log_dir, "test.log")

        logger = setup_logger(name=logger_name, log_file=log_file, level=logging.INFO)

        assert logger.name == logger_name
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 2

    def test_setup_logger_creates_log_directory(self, temp_log_dir, logger_name):
        log_file = os.path.join(temp_log_dir, "nested", "test.log")

        setup_logger(name=logger_name, log_file=log_file)

        assert os.path.isdir(os.path.join(temp_log_dir, "nested"))

    def test_setup_logger_file_handler(self, temp_log_dir, logger_name):
        log_file = os.path.join(temp_log_dir, "test.log")

        logger = setup_logger(name=logger_name, log_file=log_file)

        file_handlers = [
            h
            for h in logger.handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 5 * 1024 * 1024
        assert file_handlers[0].backupCount == 3
        assert file_handlers[0].formatter._fmt == LOG_FORMAT

    def test_setup_logger_does_not_duplicate_handlers(self, temp_log_dir, logger_name):
        log_file = os.path.join(temp_log_dir, "test.log")

        first = setup_logger(name=logger_name, log_file=log_file)
        second = setup_logger(name=logger_name, log_file=log_file)

        assert first is second
        assert len(second.handlers) == 2

    def test_setup_logger_writes_to_file(self, temp_log_dir, logger_name):
        log_file = os.path.join(temp_log_dir, "test.log")

        logger = setup_logger(name=logger_name, log_file=log_file)
        logger.info("price fetched")
        for handler in logger.handlers:
            handler.flush()

        with open(log_file, encoding="utf-8") as f:
            content = f.read()
        assert "price fetched" in content
        assert "INFO" in content

    def test_setup_logger_sets_sentry_tag_when_initialized(
        self, temp_log_dir, logger_name
    ):
        import app.core.logger as logger_module

        logger_module._sentry_initialized = True
        mock_sentry = MagicMock()

        with patch.dict("sys.modules", {"sentry_sdk": mock_sentry}):
            setup_logger(
                name=logger_name,
                log_file=os.path.join(temp_log_dir, "test.log"),
                sentry_tag="coingecko",
            )

        mock_sentry.set_tag.assert_called_once_with("component", "coingecko")

    def test_setup_logger_skips_sentry_tag_when_not_initialized(
        self, temp_log_dir, logger_name
    ):
        mock_sentry = MagicMock()

        with patch.dict("sys.modules", {"sentry_sdk": mock_sentry}):
            setup_logger(
                name=logger_name,
                log_file=os.path.join(temp_log_dir, "test.log"),
                sentry_tag="coingecko",
            )

        mock_sentry.set_tag.assert_not_called()
