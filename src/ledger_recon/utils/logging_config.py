"""Logging configuration for the reconciliation application."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    log_format: Optional[str] = None,
) -> logging.Logger:
    """
    Configure application logging.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
        log_file: Optional path to log file
        log_format: Optional custom log format string

    Returns:
        The configured ``ledger_recon`` logger
    """
    logger = logging.getLogger("ledger_recon")
    logger.setLevel(level)

    # Drop handlers from a previous call so CLI re-entry does not duplicate output
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format or DEFAULT_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(logging_config, verbose: bool = False) -> logging.Logger:
    """
    Configure logging from the ``logging`` section of a ReconConfig.

    ``verbose`` forces DEBUG regardless of the configured level.
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(logging_config.level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    log_file = Path(logging_config.file) if logging_config.file else None
    return setup_logging(level, log_file=log_file, log_format=logging_config.format)
