"""
Logging setup.

Every module logs through ``get_logger("<area>")``, which hangs off the
``srbtranslit`` logger. ``setup_logging`` configures that one logger, so
library users who never call it keep their own logging configuration.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import get_config

ROOT_LOGGER = "srbtranslit"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the srbtranslit logger from config.

    ``level`` overrides ``logging.level``, e.g. for a --verbose flag. The
    console handler writes to stderr so command output on stdout stays
    clean for piping.
    """
    log_config = get_config().logging

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, (level or log_config.level).upper()))
    logger.handlers.clear()

    formatter = logging.Formatter(log_config.format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_config.file_path:
        log_path = Path(log_config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
