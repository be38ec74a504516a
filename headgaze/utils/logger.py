"""
Logging configuration for HeadGaze.

Modules log through get_logger(__name__), which places them under the
"headgaze" package logger. The entry point configures that logger once
from AppConfig with setup_logger().
"""

import logging
import sys

from headgaze.core.config import AppConfig

PACKAGE_LOGGER = "headgaze"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(config: AppConfig, name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Configure the package logger from application configuration.

    Privacy: File logging is OFF by default (StorageConfig.enable_file_logging).
    Per-frame coordinates are only logged at DEBUG level.

    Calling again updates the level but does not add handlers twice.

    Args:
        config: Application configuration (log_level and storage paths)
        name: Logger to configure (the package logger by default)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    numeric_level = getattr(logging, config.log_level.upper(), logging.WARNING)
    logger.setLevel(numeric_level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(numeric_level)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    storage = config.storage
    if storage.enable_file_logging:
        log_file = storage.log_path
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
            logger.info(f"File logging enabled: {log_file}")
        except OSError as e:
            logger.warning(f"Failed to enable file logging: {e}")

    # Handlers live on the package logger only
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (typically get_logger(__name__))."""
    return logging.getLogger(name)
