"""Shared utility modules for common operations.

This package provides:
- Data size formatting (bytes to human-readable, decimal or binary units)
- Time duration formatting (seconds to human-readable)
- Logging setup with per-root context tracking
"""

from disk_scan.utils.formatting import (
    format_duration,
    format_size,
)

__all__ = [
    "format_duration",
    "format_size",
]
