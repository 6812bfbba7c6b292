"""Pure formatting utilities for human-readable output.

This module provides stateless formatting functions for converting raw byte
counts and durations into human-readable strings. All functions are pure with
no side effects.
"""

from typing import Final

from disk_scan.types.models import UnitSystem

# Unit ladders per unit system
_DECIMAL_BASE: Final[int] = 1000
_DECIMAL_UNITS: Final[tuple[str, ...]] = ("B", "kB", "MB", "GB", "TB", "PB", "EB")

_BINARY_BASE: Final[int] = 1024
_BINARY_UNITS: Final[tuple[str, ...]] = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")

# Time unit constants
_MILLISECONDS_PER_SECOND = 1000
_MINUTE = 60
_HOUR = _MINUTE * 60  # 3,600
_DAY = _HOUR * 24  # 86,400


def format_size(
    bytes: int,
    unit_system: UnitSystem = UnitSystem.DECIMAL,
    *,
    precision: int = 2,
) -> str:
    """Convert bytes to human-readable size format.

    Picks the largest unit the value reaches in the requested unit system and
    renders it with up to ``precision`` decimal places, trailing zeros removed.

    Args:
        bytes: Number of bytes to format (must be non-negative)
        unit_system: Decimal (1000-based, kB/MB) or binary (1024-based, KiB/MiB)
        precision: Maximum number of decimal places (default: 2)

    Returns:
        Human-readable string representation of the size.

    Examples:
        >>> format_size(512)
        '512 B'
        >>> format_size(2048)
        '2.05 kB'
        >>> format_size(2048, UnitSystem.BINARY)
        '2 KiB'
        >>> format_size(1572864, UnitSystem.BINARY)
        '1.5 MiB'
    """
    if bytes < 0:
        msg = "bytes must be non-negative"
        raise ValueError(msg)

    if unit_system == UnitSystem.BINARY:
        base, units = _BINARY_BASE, _BINARY_UNITS
    else:
        base, units = _DECIMAL_BASE, _DECIMAL_UNITS

    if bytes < base:
        return f"{bytes} B"

    value = float(bytes)
    index = 0
    while value >= base and index < len(units) - 1:
        value /= base
        index += 1

    text = f"{value:.{precision}f}"
    if precision > 0:
        text = text.rstrip("0").rstrip(".")

    return f"{text} {units[index]}"


def format_duration(seconds: float) -> str:
    """Convert seconds to human-readable duration format.

    Automatically selects appropriate time units based on magnitude.
    Sub-minute durations keep millisecond precision since most scans
    finish in seconds.

    Args:
        seconds: Duration in seconds (must be non-negative)

    Returns:
        Human-readable duration string with adaptive granularity.
        - Days: "Xd Yh"
        - Hours: "Xh Ym"
        - Minutes: "Xm Ys"
        - Seconds: "Xs Yms"
        - Below one second: "Yms"

    Examples:
        >>> format_duration(0.25)
        '250ms'
        >>> format_duration(1.5)
        '1s 500ms'
        >>> format_duration(90)
        '1m 30s'
        >>> format_duration(90000)
        '1d 1h'
    """
    if seconds < 0:
        msg = "seconds must be non-negative"
        raise ValueError(msg)

    total_seconds = int(seconds)

    if total_seconds >= _DAY:
        days = total_seconds // _DAY
        hours = (total_seconds % _DAY) // _HOUR

        if hours > 0:
            return f"{days}d {hours}h"
        return f"{days}d"

    if total_seconds >= _HOUR:
        hours = total_seconds // _HOUR
        minutes = (total_seconds % _HOUR) // _MINUTE

        if minutes > 0:
            return f"{hours}h {minutes}m"
        return f"{hours}h"

    if total_seconds >= _MINUTE:
        minutes = total_seconds // _MINUTE
        remaining = total_seconds % _MINUTE

        if remaining > 0:
            return f"{minutes}m {remaining}s"
        return f"{minutes}m"

    milliseconds = int(seconds * _MILLISECONDS_PER_SECOND) % _MILLISECONDS_PER_SECOND

    if total_seconds == 0:
        return f"{milliseconds}ms"
    if milliseconds > 0:
        return f"{total_seconds}s {milliseconds}ms"
    return f"{total_seconds}s"
