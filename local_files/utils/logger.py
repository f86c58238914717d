"""Logging setup for Local Files."""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logger(
    name: str = "local_files",
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True
) -> logging.Logger:
    """
    Set up logging for the application.

    Module loggers (local_files.core.scanner etc.) propagate to this one.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        console: Enable console output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear any existing handlers
    logger.handlers = []

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logger_from_config(config, level: Optional[str] = None) -> logging.Logger:
    """
    Set up the package logger from the 'logging' section of a Config.

    Args:
        config: Configuration object
        level: Overrides logging.level when given

    Returns:
        Configured logger instance
    """
    return setup_logger(
        level=level or config.get('logging.level', 'INFO'),
        log_file=config.get('logging.file'),
        console=config.get('logging.console', True)
    )
