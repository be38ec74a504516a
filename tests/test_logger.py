"""
Tests for logging setup.
"""

import logging

import pytest

from headgaze.core.config import AppConfig, StorageConfig
from headgaze.utils.logger import get_logger, setup_logger


@pytest.fixture
def logger_name():
    name = "headgaze_test_logging"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


class TestSetupLogger:
    def test_level_from_config(self, logger_name, tmp_path):
        config = AppConfig(storage=StorageConfig(data_dir=tmp_path), log_level="debug")

        logger = setup_logger(config, name=logger_name)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_unknown_level_falls_back_to_warning(self, logger_name, tmp_path):
        config = AppConfig(storage=StorageConfig(data_dir=tmp_path), log_level="chatty")

        assert setup_logger(config, name=logger_name).level == logging.WARNING

    def test_file_logging_opt_in(self, logger_name, tmp_path):
        storage = StorageConfig(data_dir=tmp_path / "logs", enable_file_logging=True)
        config = AppConfig(storage=storage, log_level="INFO")

        logger = setup_logger(config, name=logger_name)
        logger.info("tracking started")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "tracking started" in storage.log_path.read_text(encoding="utf-8")

    def test_reconfigure_updates_level_without_duplicate_handlers(self, logger_name, tmp_path):
        storage = StorageConfig(data_dir=tmp_path)
        setup_logger(AppConfig(storage=storage, log_level="WARNING"), name=logger_name)

        logger = setup_logger(AppConfig(storage=storage, log_level="DEBUG"), name=logger_name)

        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.DEBUG

    def test_module_loggers_are_children(self, logger_name):
        package = logging.getLogger(logger_name)

        assert get_logger(f"{logger_name}.vision").parent is package
