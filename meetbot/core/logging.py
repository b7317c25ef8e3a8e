"""
Logging for the recorder bot.

Everything logs under the ``meeting_bot`` logger: a colored console stream,
plus a daily rotating file when ``LOG_TO_FILE`` is on. Log lines of one bot
job carry its correlation id as a ``[id]`` prefix.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from meetbot.config import settings

ROOT_LOGGER = "meeting_bot"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class ColoredFormatter(logging.Formatter):
    """Console formatter that tints the level name."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # Tint a copy; the file handler sees the same record
        tinted = logging.makeLogRecord(record.__dict__)
        tinted.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(tinted)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(level: int, log_file: Optional[str]) -> logging.Handler:
    if log_file is None:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = str(log_dir / f"meetbot_{datetime.now():%Y%m%d}.log")
    handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    enable_file_logging: Optional[bool] = None,
) -> logging.Logger:
    """
    (Re)configure the ``meeting_bot`` logger.

    Args:
        log_level: Level name, defaults to ``settings.log_level``
        log_file: Explicit log file path, defaults to a dated file in ``settings.log_dir``
        enable_file_logging: Defaults to ``settings.log_to_file``

    Returns:
        The configured root bot logger
    """
    level = logging.getLevelName((log_level or settings.log_level).upper())
    if enable_file_logging is None:
        enable_file_logging = settings.log_to_file

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_console_handler(level))
    if enable_file_logging:
        root.addHandler(_file_handler(level, log_file))
    return root


def get_logger(name: str) -> logging.Logger:
    """Child of the bot logger, e.g. ``get_logger("telemost")`` -> ``meeting_bot.telemost``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def correlation_prefix(correlation_id: str) -> str:
    return f"[{correlation_id}]"


logger = setup_logging()
