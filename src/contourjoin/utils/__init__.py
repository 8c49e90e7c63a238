"""Utility functions for contourjoin.

This module provides utility functions including:

- Logging setup and configuration
- Batch statistics collection
"""

from contourjoin.utils.logging import (
    JoinLogger,
    JoinStats,
    configure_logging,
)

__all__ = [
    "JoinLogger",
    "JoinStats",
    "configure_logging",
]
