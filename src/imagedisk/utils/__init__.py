"""
Utility functions for the ImageDisk reader.

This module provides logging setup and hex dump formatting.
"""

from imagedisk.utils.logging import (
    setup_logging,
    log_operation,
    log_performance,
)

from imagedisk.utils.hexdump import hexdump_lines

__all__ = [
    # Logging
    "setup_logging",
    "log_operation",
    "log_performance",

    # Formatting
    "hexdump_lines",
]
