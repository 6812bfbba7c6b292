"""Logging infrastructure with per-root context tracking.

This module provides the logging setup for the disk-scan application. Each
concurrent root aggregation runs with its root entry stored in a ContextVar,
so every log record emitted on behalf of that root (including records from
threads started through asyncio.to_thread) can be attributed to it.

Log output goes to stderr; stdout is reserved for the report itself.
"""

import contextvars
import logging
import sys
from collections.abc import Mapping
from typing import Final, override

# Root entry currently being scanned, for attributing log records
# Automatically inherited by asyncio tasks and copied by asyncio.to_thread
scan_root_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scan_root",
    default=None,
)

# Log format constants
DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(scan_root)s] - %(message)s"

DEFAULT_LOG_LEVEL: Final[str] = "WARNING"


class ScanRootFilter(logging.Filter):
    """Logging filter that adds the current scan root to log records.

    Records emitted outside any root task are stamped with "-".
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add scan root to log record from ContextVar.

        Args:
            record: Log record to enhance with the scan root

        Returns:
            True to allow the record to be logged
        """
        scan_root = scan_root_var.get()
        record.scan_root = scan_root if scan_root is not None else "-"
        return True


def configure_logging(
    *,
    log_level: str = DEFAULT_LOG_LEVEL,
    enable_console: bool = True,
) -> None:
    """Configure application logging.

    Sets up logging infrastructure with:
    - Scan root tracking via ContextVar
    - Console output on stderr
    - Structured log formatting

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_console: Enable console output handler

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> logger = logging.getLogger(__name__)
        >>> set_scan_root("/data/media")
        >>> logger.debug("Walk finished", extra={"files": 42})
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.WARNING)
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        console_handler.addFilter(ScanRootFilter())
        root_logger.addHandler(console_handler)


def set_scan_root(scan_root: str) -> contextvars.Token[str | None]:
    """Set the scan root for the current context.

    Args:
        scan_root: Path of the root entry being scanned

    Returns:
        Token that can be passed to reset_scan_root
    """
    return scan_root_var.set(scan_root)


def reset_scan_root(token: contextvars.Token[str | None]) -> None:
    """Restore the scan root that was active before set_scan_root."""
    scan_root_var.reset(token)


def get_scan_root() -> str | None:
    """Get the current scan root from context."""
    return scan_root_var.get()


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    extra: Mapping[str, object] | None = None,
) -> None:
    """Log a message with additional context fields.

    Convenience function for structured logging with extra context fields.
    Automatically includes the scan root from the ContextVar.

    Args:
        logger: Logger instance to use
        level: Logging level (e.g., logging.INFO)
        message: Log message
        extra: Additional context fields to include in log
    """
    context = dict(extra) if extra else {}

    scan_root = get_scan_root()
    if scan_root:
        context["root"] = scan_root

    logger.log(level, message, extra=context)
