"""Tests for logging configuration"""
import tempfile
import os
import logging
from pathlib import Path
from unittest.mock import patch

from config import Config
from logging_config import (
    setup_structured_logging,
    get_logger,
    log_poll_cycle,
    log_server_startup,
    log_error
)


class TestLoggingConfig:
    """Test logging configuration and structured logging"""

    def test_setup_structured_logging(self):
        """Test structured logging setup with a log file"""
        with tempfile.TemporaryDirectory() as tmp_dir:
            log_file = Path(tmp_dir) / "logs" / "test.log"

            config = Config()
            config.log_file = log_file
            config.log_level = "DEBUG"

            setup_structured_logging(config)

            assert log_file.parent.exists()
            logger = logging.getLogger("test")
            assert logger.isEnabledFor(logging.DEBUG)

            logging.getLogger().handlers.clear()

    def test_setup_without_log_file(self):
        config = Config()
        config.log_file = None
        config.log_level = "WARNING"

        setup_structured_logging(config)

        root = logging.getLogger()
        assert not root.isEnabledFor(logging.INFO)
        assert all(not isinstance(h, logging.FileHandler) for h in root.handlers)

    def test_get_logger(self):
        """Test getting structured logger"""
        logger = get_logger("test_logger")

        assert logger is not None
        assert hasattr(logger, 'info')
        assert hasattr(logger, 'error')
        assert hasattr(logger, 'debug')
        assert hasattr(logger, 'warning')

    def test_log_poll_cycle(self):
        """Test structured poll logging"""
        logger = get_logger("test")

        # This should not raise an exception
        log_poll_cycle(logger, autoscaler_count=3, observation_count=20, poll_time=0.25)

    def test_log_server_startup(self):
        """Test structured server startup logging"""
        logger = get_logger("test")
        config = Config()

        log_server_startup(logger, config)

    def test_log_error(self):
        """Test structured error logging"""
        logger = get_logger("test")
        error = ValueError("Test error")
        context = {"component": "test", "phase": "fetch"}

        log_error(logger, error, context)
        log_error(logger, error)  # Without context

    def test_development_vs_production_logging(self):
        """Test different logging configurations for development vs production"""
        config = Config()

        with patch.dict(os.environ, {"ENVIRONMENT": "development"}):
            setup_structured_logging(config)
            logger = get_logger("test")
            logger.info("Test development log")

        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            setup_structured_logging(config)
            logger = get_logger("test")
            logger.info("Test production log")

    def test_logger_context_binding(self):
        """Test logger context binding"""
        logger = get_logger("test")

        bound_logger = logger.bind(hpa_name="web", hpa_namespace="prod")
        bound_logger.info("Test message with context")
