"""
Logging configuration for the ImageDisk reader.

Provides logging setup for the command-line driver and small helpers for
consistent operation and timing messages.
"""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(log_file: Optional[str] = None, level: int = logging.WARNING) -> None:
    """
    Configure logging for the application.

    Console output goes to stderr so it never mixes with the report on
    stdout. When a log file is given it receives the same records with
    timestamps.

    Args:
        log_file: Optional path to a log file
        level: Logging level (default: logging.WARNING)

    Example:
        >>> setup_logging(level=logging.DEBUG)
        >>> logging.info("Decoding started")
    """
    # Replace handlers from an earlier call
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            filename=log_file,
            encoding='utf-8',
            level=level,
            format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            force=True,
        )
    else:
        logging.basicConfig(level=level, handlers=[], force=True)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
    logging.getLogger().addHandler(console_handler)


def log_operation(operation: str, details: str, level: int = logging.INFO) -> None:
    """
    Log an operation with details.

    Args:
        operation: Name of the operation (e.g., "decode", "export_raw")
        details: Additional details about the operation
        level: Logging level (default: logging.INFO)

    Example:
        >>> log_operation("export_raw", "disk.img: 737280 bytes")
    """
    logging.log(level, "%s: %s", operation, details)


def log_performance(operation: str, duration: float, **metrics) -> None:
    """
    Log performance metrics for an operation.

    Args:
        operation: Name of the operation
        duration: Duration in seconds
        **metrics: Additional metrics (e.g., tracks=160)

    Example:
        >>> log_performance("decode", 0.12, tracks=160, sectors=2880)
    """
    metrics_str = ", ".join(f"{k}={v}" for k, v in metrics.items())
    logging.info("Performance - %s: %.2fs, %s", operation, duration, metrics_str)
