"""
Unit tests for logging setup.
"""

import contextlib
import logging

from helper import logging_config


@contextlib.contextmanager
def bare_root_logger():
    """Run a block with no root handlers, restoring whatever pytest had attached."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        yield root
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)


class TestLoggingConfig:
    """Test log level resolution and handler setup."""

    def test_default_level(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        assert logging_config.get_log_level() == "INFO"

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")

        assert logging_config.get_log_level() == "WARNING"

    def test_setup_adds_one_handler(self):
        with bare_root_logger() as root:
            logging_config.setup_logging("DEBUG")
            logging_config.setup_logging("DEBUG")

            handlers, level = root.handlers[:], root.level

        assert len(handlers) == 1
        assert isinstance(handlers[0], logging.StreamHandler)
        assert level == logging.DEBUG

    def test_setup_keeps_existing_handlers(self):
        existing = logging.NullHandler()

        with bare_root_logger() as root:
            root.addHandler(existing)
            logging_config.setup_logging("WARNING")

            handlers, level = root.handlers[:], root.level

        assert handlers == [existing]
        assert level == logging.WARNING

    def test_get_logger_configures_root(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        with bare_root_logger() as root:
            logger = logging_config.get_logger("stacks.nlb_service.stack")

            handlers, level = root.handlers[:], root.level

        assert logger.name == "stacks.nlb_service.stack"
        assert len(handlers) == 1
        assert level == logging.INFO

    def test_configure_debug_logging(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")

        with bare_root_logger() as root:
            logging_config.configure_debug_logging()

            level = root.level

        assert logging_config.os.environ["LOG_LEVEL"] == "DEBUG"
        assert level == logging.DEBUG
