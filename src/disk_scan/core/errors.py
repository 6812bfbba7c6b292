"""Exception hierarchy for fatal scan conditions.

Only fatal conditions are modelled as exceptions. Per-entry traversal and
size-probe failures are absorbed by the walker and aggregator and never
surface here.
"""

from pathlib import Path


class DiskScanError(Exception):
    """Base exception for all fatal disk-scan errors."""


class ConfigurationError(DiskScanError):
    """Exception raised when configuration loading or validation fails.

    This exception provides detailed, actionable error messages for configuration
    issues including file not found, YAML parsing errors, and validation failures.
    """


class EnvironmentVariableError(DiskScanError):
    """Exception raised when environment variable resolution fails."""


class ExclusionError(ConfigurationError):
    """Raised when the exclusion list contains malformed input."""


class ScanError(DiskScanError):
    """Base exception for fatal failures during a scan run."""

    path: Path

    def __init__(self, message: str, *, path: Path) -> None:
        super().__init__(message)
        self.path = path


class RootDirectoryError(ScanError):
    """Raised when the scan root cannot be listed."""


class ReportWriteError(ScanError):
    """Raised when the CSV report cannot be created or written."""
