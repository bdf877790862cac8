"""
Logging configuration for the synthesis and template tooling.

Synthesis runs as a short-lived CLI process (`cdk synth`, `template-generator.py`),
so a single stdout handler on the root logger is enough. The level comes from
the LOG_LEVEL environment variable unless passed explicitly.
"""

import logging
import os
import sys

DEFAULT_LOG_LEVEL = "INFO"
DEBUG_LOG_LEVEL = "DEBUG"

LOG_LEVEL_ENV_VAR = "LOG_LEVEL"

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_log_level() -> str:
    """
    Get the configured log level.

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR)
    """
    return os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()


def setup_logging(level: str = None, format_string: str = None) -> logging.Logger:
    """
    Set up root logging once per process.

    Args:
        level: Log level override (DEBUG, INFO, WARNING, ERROR)
        format_string: Custom format string for log messages

    Returns:
        The root logger
    """
    if not level:
        level = get_log_level()

    root_logger = logging.getLogger()

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
        root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, level, logging.INFO))
    return root_logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a module logger, configuring root logging on first use."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(module_name)


def configure_debug_logging():
    """Enable debug logging for all modules."""
    os.environ[LOG_LEVEL_ENV_VAR] = DEBUG_LOG_LEVEL

    logging.getLogger().setLevel(logging.DEBUG)
    for name in logging.Logger.manager.loggerDict:
        logging.getLogger(name).setLevel(logging.DEBUG)
