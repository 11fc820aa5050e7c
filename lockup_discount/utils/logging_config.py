"""Logging configuration for the lockup discount engine.

Every module logs under the ``lockup_discount`` logger hierarchy so a host
application can tune verbosity for the whole engine in one place.
"""

import logging
import sys
from typing import Optional
from pathlib import Path

ROOT_LOGGER_NAME = "lockup_discount"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """Configure logging for the engine and its command line tools.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, logs only to console.
        log_format: Optional custom log format string

    Returns:
        Configured root engine logger

    Example:
        >>> logger = setup_logging(log_level="DEBUG", log_file="logs/discount.log")
        >>> logger.info("Pricing %d ATM strikes", 5)
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    logger.handlers.clear()

    if log_format is None:
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s'

    formatter = logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger inside the engine hierarchy.

    Args:
        name: Optional child name, e.g. ``"variance"``. If None, returns the
            root engine logger.

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)
