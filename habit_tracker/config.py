"""
Environment-driven configuration and logging setup.
"""
import logging
import os
from pathlib import Path

from habit_tracker.constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_BACKUP_DIRECTORY,
    DEFAULT_BACKUP_TIME,
    DEFAULT_BACKUP_KEEP_COUNT,
    DEFAULT_LOG_DIRECTORY_PROD,
    DEFAULT_LOG_DIRECTORY_DEV,
    DEFAULT_LOG_FILE,
    DEFAULT_SNAPSHOT_KEY,
    LOG_FORMAT,
)

DATABASE_URL = os.getenv("HABIT_TRACKER_DB_URL", DEFAULT_DATABASE_URL)
SNAPSHOT_KEY = os.getenv("HABIT_TRACKER_SNAPSHOT_KEY", DEFAULT_SNAPSHOT_KEY)
BACKUP_DIR = os.getenv("HABIT_TRACKER_BACKUP_DIR", DEFAULT_BACKUP_DIRECTORY)
BACKUP_TIME = os.getenv("HABIT_TRACKER_BACKUP_TIME", DEFAULT_BACKUP_TIME)
BACKUP_KEEP_COUNT = int(os.getenv("HABIT_TRACKER_BACKUP_KEEP", str(DEFAULT_BACKUP_KEEP_COUNT)))
LOG_DIR = os.getenv("HABIT_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("HABIT_TRACKER_LOG_FILE", DEFAULT_LOG_FILE)


def setup_logging(level: int = logging.INFO) -> Path:
    """
    Configure root logging with a file handler and a console handler.

    Falls back to a local log directory when the configured one is not writable.

    Returns:
        Path of the log file in use
    """
    log_dir = LOG_DIR
    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
    except PermissionError:
        log_dir = DEFAULT_LOG_DIRECTORY_DEV
        Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_path = Path(log_dir) / LOG_FILE

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler()
        ]
    )
    return log_path
