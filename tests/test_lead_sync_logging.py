"""Tests for logging setup."""

import logging
from logging.handlers import RotatingFileHandler

from modules.lead_sync.logging_setup import LOGGER_NAME, setup_logging


def test_setup_logging_with_file(tmp_path):
    log_file = tmp_path / 'logs' / 'lead_sync.log'

    logger = setup_logging('debug', str(log_file))
    try:
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)

        logging.getLogger(f'{LOGGER_NAME}.sync_engine').info('Created Trello card c1 for lead 42')
        for handler in logger.handlers:
            handler.flush()

        assert 'Created Trello card c1 for lead 42' in log_file.read_text()
        assert logging.getLogger('httpx').level == logging.WARNING
    finally:
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()


def test_setup_logging_replaces_handlers():
    logger = setup_logging('INFO')
    setup_logging('INFO')
    try:
        assert len(logger.handlers) == 1
    finally:
        logger.handlers.clear()


def test_setup_logging_defaults_come_from_config(tmp_path, mocker):
    from modules.lead_sync.config import Config

    log_file = tmp_path / 'lead_sync.log'
    mocker.patch.object(Config, 'LOG_LEVEL', 'WARNING')
    mocker.patch.object(Config, 'LOG_FILE', str(log_file))

    logger = setup_logging()
    try:
        assert logger.level == logging.WARNING
        assert [h.baseFilename for h in logger.handlers if isinstance(h, RotatingFileHandler)] == [str(log_file)]
    finally:
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
