"""
Logging Configuration for the EIP-7702 Batch Sponsor Demo

Provides structured logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- File rotation (1 file per day)
- Separate error log
- Console and file handlers
"""

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional


# Log directory (created on first file handler)
LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))

# Log formats
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console: bool = True,
    detailed: bool = False,
    to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Setup a logger with console and file handlers.

    Args:
        name: Logger name (typically the package name)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file name (defaults to name.log)
        console: Whether to log to console
        detailed: Whether to use detailed format (includes file/line)
        to_file: Whether to attach the rotating file handlers
        log_dir: Directory for log files (defaults to LOG_DIR)

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("batch_sponsor", level=logging.DEBUG)
        >>> logger.info("Checking delegation status")
        >>> logger.error("Sponsored batch failed", exc_info=True)
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    # Choose format
    log_format = DETAILED_FORMAT if detailed else SIMPLE_FORMAT
    formatter = logging.Formatter(log_format, datefmt=DATE_FORMAT)

    # Console handler
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if not to_file:
        return logger

    directory = Path(log_dir) if log_dir is not None else LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    # File handler with daily rotation
    if log_file is None:
        log_file = f"{name}.log"

    file_handler = TimedRotatingFileHandler(
        directory / log_file,
        when="midnight",
        interval=1,
        backupCount=30,  # Keep 30 days of logs
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # Separate error log
    error_handler = RotatingFileHandler(
        directory / f"{name}_errors.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(error_handler)

    return logger


def log_step(
    logger: logging.Logger,
    step: str,
    success: bool = True,
    tx_hash: Optional[str] = None,
    detail: Optional[str] = None,
):
    """
    Log one orchestration step in structured format.

    Args:
        logger: Logger instance
        step: Step name (e.g. "self_paid_batch")
        success: Whether the step succeeded
        tx_hash: Transaction hash, for steps that submit one
        detail: Short free-form summary
    """
    status = "SUCCESS" if success else "FAILED"
    msg = f"{status} | {step}"
    if detail:
        msg += f" | {detail}"
    if tx_hash:
        msg += f" | TX: {tx_hash}"

    if success:
        logger.info(msg)
    else:
        logger.error(msg)


def level_from_name(name: Optional[str], default: int = logging.INFO) -> int:
    """Translate a LOG_LEVEL string such as "debug" into a logging level."""
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def get_demo_logger(debug: bool = False, to_file: bool = True) -> logging.Logger:
    """Get the package logger used by the command line entry point."""
    level = logging.DEBUG if debug else level_from_name(os.getenv("LOG_LEVEL"))
    return setup_logger("batch_sponsor", level=level, detailed=debug, to_file=to_file)
