"""Utility functions for retrace.

This module provides utility functions including:

- Logging setup and configuration
- Per-run statistics collection
"""

from retrace.utils.logging import (
    TraceLogger,
    TraceStats,
    configure_logging,
)

__all__ = [
    "TraceLogger",
    "TraceStats",
    "configure_logging",
]
