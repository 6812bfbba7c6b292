"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols for the pluggable
collaborators of the scan pipeline.
"""

import os
from pathlib import Path
from typing import Protocol

from disk_scan.types.models import UnitSystem


class RealSizeProbe(Protocol):
    """Protocol for the "size on disk" probe of a single file."""

    def __call__(self, path: Path, metadata: os.stat_result) -> int:
        """Return the number of bytes the file occupies.

        Args:
            path: File path
            metadata: lstat result for the file

        Returns:
            Size in bytes

        Raises:
            OSError: If the size cannot be determined
        """
        ...


class SizeFormatter(Protocol):
    """Protocol for human-readable size rendering."""

    def __call__(self, bytes: int, unit_system: UnitSystem) -> str:
        """Render a byte count for display."""
        ...
