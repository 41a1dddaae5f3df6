"""Logging configuration for orchd.

This module provides logging setup with:
- Colored console output on stderr using colorlog
- Optional file logging with rotation
- Optional JSON structured logging for the file handler
- Environment variable configuration support

stdout is reserved for the JSON response stream, so nothing here ever
writes to it.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog
from pythonjsonlogger import json


def setup_logging(
    log_level: str = "WARNING",
    log_file_level: str = "DEBUG",
    log_dir: Path | str | None = None,
    log_file_name: str = "orchd.log",
    log_json_format: bool = False,
    log_max_bytes: int = 10485760,  # 10MB
    log_backup_count: int = 5,
    force: bool = False,
) -> None:
    """Configure logging for orchd.

    Sets up:
    - Colored console handler on stderr (WARNING level by default)
    - Rotating file handler (DEBUG level by default) when a log directory is given
    - Optional JSON formatter for the file handler

    Args:
        log_level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file_level: File log level (typically DEBUG for full details)
        log_dir: Directory for log files; None disables file logging
        log_file_name: Name of the log file
        log_json_format: Enable JSON structured logging format
        log_max_bytes: Maximum size of log file before rotation (default: 10MB)
        log_backup_count: Number of backup log files to keep (default: 5)
        force: Force reconfiguration even if logging is already configured

    Environment Variables:
        ORCHD_LOG_LEVEL: Override console log level
        ORCHD_LOG_FILE_LEVEL: Override file log level
        ORCHD_LOG_DIR: Override log directory
        ORCHD_LOG_FILE_NAME: Override log file name
        ORCHD_LOG_JSON_FORMAT: Enable JSON logging (set to 'true' or '1')
        ORCHD_LOG_MAX_BYTES: Override max file size
        ORCHD_LOG_BACKUP_COUNT: Override backup count
    """
    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        return

    log_level = os.getenv("ORCHD_LOG_LEVEL", log_level).upper()
    log_file_level = os.getenv("ORCHD_LOG_FILE_LEVEL", log_file_level).upper()
    log_dir = os.getenv("ORCHD_LOG_DIR", log_dir)
    log_file_name = os.getenv("ORCHD_LOG_FILE_NAME", log_file_name)
    log_json_format = os.getenv("ORCHD_LOG_JSON_FORMAT", str(log_json_format)).lower() in ("true", "1", "yes")
    try:
        log_max_bytes = int(os.getenv("ORCHD_LOG_MAX_BYTES", log_max_bytes))
    except ValueError:
        log_max_bytes = 10485760
    try:
        log_backup_count = int(os.getenv("ORCHD_LOG_BACKUP_COUNT", log_backup_count))
    except ValueError:
        log_backup_count = 5

    numeric_level = getattr(logging, log_level, logging.WARNING)
    numeric_file_level = getattr(logging, log_file_level, logging.DEBUG)

    # Set to lowest level, handlers will filter
    root_logger.setLevel(logging.DEBUG)

    if force:
        root_logger.handlers.clear()

    console_handler = colorlog.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    color_formatter = colorlog.ColoredFormatter(
        "%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        reset=True,
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
        secondary_log_colors={},
        style="%",
    )
    console_handler.setFormatter(color_formatter)
    root_logger.addHandler(console_handler)

    log_file_path = None
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file_path = log_dir / log_file_name
        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=log_max_bytes,
            backupCount=log_backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_file_level)

        if log_json_format:
            file_handler.setFormatter(
                json.JsonFormatter(
                    "%(asctime)s %(name)s %(levelname)s %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug(
        f"Logging configured: console={log_level}, file={log_file_level if log_file_path else 'off'}, "
        f"file_path={log_file_path}, json_format={log_json_format}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Ensures logging is configured before returning the logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger: Configured logger instance
    """
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        setup_logging()

    return logging.getLogger(name)
