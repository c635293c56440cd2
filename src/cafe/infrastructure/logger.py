"""Logging configuration for the application."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from cafe.infrastructure.config import Settings, get_settings


def setup_logger(
    name: str = "cafe",
    log_file: Optional[str] = None,
    level: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> logging.Logger:
    """
    Setup a logger with console and optional file handlers.

    Module loggers (``cafe.application.order_service``...) propagate to the
    ``cafe`` logger, so configuring it once covers the whole package.

    Args:
        name: Logger name
        log_file: Optional log file path (defaults to the configured one)
        level: Optional log level (overrides config)
        settings: Optional settings (defaults to the cached ones)

    Returns:
        Configured logger instance
    """
    settings = settings or get_settings()

    logger = logging.getLogger(name)
    log_level = level or settings.log_level
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(settings.log_format)

    # Console handler on stderr, stdout belongs to command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or settings.log_file
    if log_file and not settings.is_production:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
