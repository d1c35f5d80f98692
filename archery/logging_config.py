"""Logging setup for the tournament manager.

All modules log under the ``archery`` logger tree (``archery.match``,
``archery.session``, ...). The level and log directory default to the
``log_level`` and ``log_dir`` entries of the tournament configuration.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import get_config

ROOT_LOGGER = 'archery'

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def configured_level() -> int:
    """Numeric logging level named by the configuration (INFO by default)."""
    return logging.getLevelName(get_config().log_level)


def session_log_path(log_dir: Path, started: Optional[datetime] = None) -> Path:
    """One log file per run, e.g. ``logs/archery_20260501_093000.log``."""
    stamp = (started or datetime.now()).strftime('%Y%m%d_%H%M%S')
    return log_dir / f'archery_{stamp}.log'


def setup_logging(
    log_dir: Optional[Path] = None,
    level: Optional[int] = None,
    log_to_file: bool = True,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the ``archery`` logger.

    Args:
        log_dir: Directory for log files (default: configured ``log_dir``)
        level: Logging level (default: configured ``log_level``)
        log_to_file: Write a per-run log file with source locations
        log_to_console: Echo short messages to stdout

    Returns:
        The configured ``archery`` logger
    """
    if level is None:
        level = configured_level()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    # Replace handlers from an earlier call
    logger.handlers = []

    if log_to_file:
        log_dir = Path(log_dir if log_dir is not None else get_config().log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(session_log_path(log_dir))
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger under the ``archery`` tree; unconfigured until ``setup_logging`` runs."""
    return logging.getLogger(name)
