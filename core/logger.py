"""Centralized logging configuration."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers see the same record, so only a copy is colored
        colored = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, '')
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _console_handler(level: int, colored: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter_cls = ColoredFormatter if colored else logging.Formatter
    handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    return handler


def _file_handler(log_file: str, level: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    handler.setLevel(level)
    return handler


def setup_logger(
    name: str = "waitlist",
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    colored: bool = True
) -> logging.Logger:
    """Configure a named logger with a console handler and an optional log file.

    ``level`` may be numeric or a level name such as ``"DEBUG"``. Existing
    handlers on the logger are replaced.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    logger.addHandler(_console_handler(level, colored))
    if log_file:
        logger.addHandler(_file_handler(log_file, level))
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
