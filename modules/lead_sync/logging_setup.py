"""
Logging Configuration

Every lead sync module logs through logging.getLogger(__name__), so all of
them sit under the "modules.lead_sync" logger configured here. Level and
rotating log file default to LEAD_SYNC_LOG_LEVEL / LEAD_SYNC_LOG_FILE.
HTTP and Google client libraries are held at WARNING so per-request noise
from the Trello and Sheets calls does not bury the sync log lines.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler

from .config import config

LOGGER_NAME = "modules.lead_sync"

# Chatty third-party loggers
QUIET_LOGGERS = ("httpx", "httpcore", "google", "urllib3")


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_size_mb: int = 10,
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the lead sync logger tree.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR); defaults to config.LOG_LEVEL
        log_file: Rotating log file path; defaults to config.LOG_FILE (none if unset)
        max_size_mb: Max log file size before rotation
        backup_count: Number of backup files to keep

    Returns:
        The "modules.lead_sync" logger
    """
    level = level or config.LOG_LEVEL
    log_file = log_file or config.LOG_FILE

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug(f"Logging configured: level={level.upper()} file={log_file or '-'}")
    return logger
