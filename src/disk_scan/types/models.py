"""Data models for disk-scan application.

This module defines immutable dataclasses and enumerations used throughout
the application for type-safe data transfer between scan components.
"""

import os
from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import Final

# Binary magnitude step used by size classification (1 KiB)
SIZE_CLASS_STEP: Final[int] = 1024


class SizeClass(IntEnum):
    """Discrete magnitude bucket assigned to a byte total.

    Ordered by magnitude so that results sort by class first. The integer
    value is the power of 1024 the class starts at.
    """

    B = 0
    KIB = 1
    MIB = 2
    GIB = 3
    TIB = 4
    PIB = 5
    EIB = 6

    @property
    def label(self) -> str:
        """Unit label written to reports (e.g. "KiB")."""
        return _SIZE_CLASS_LABELS[self]

    @property
    def threshold(self) -> int:
        """Byte count a total must strictly exceed to reach this class."""
        return SIZE_CLASS_STEP**self.value


_SIZE_CLASS_LABELS: Final[dict[SizeClass, str]] = {
    SizeClass.B: "B",
    SizeClass.KIB: "KiB",
    SizeClass.MIB: "MiB",
    SizeClass.GIB: "GiB",
    SizeClass.TIB: "TiB",
    SizeClass.PIB: "PiB",
    SizeClass.EIB: "EiB",
}


class UnitSystem(str, Enum):
    """Unit system used for human-readable size display."""

    DECIMAL = "decimal"  # 1000-based: kB, MB, GB
    BINARY = "binary"  # 1024-based: KiB, MiB, GiB


class SizeMode(str, Enum):
    """Enumeration for size calculation modes."""

    APPARENT = "apparent"  # Apparent size (file content size)
    DISK_USAGE = "disk_usage"  # Actual disk usage (allocated filesystem blocks)


class ScanPhase(str, Enum):
    """Linear phases of a single scan run."""

    LISTING = "listing"
    DISPATCHING = "dispatching"
    AGGREGATING = "aggregating"
    DRAINING = "draining"
    REPORTING = "reporting"
    DONE = "done"


@dataclass(slots=True, frozen=True)
class RootEntry:
    """Immediate child of the scan root, scanned by exactly one task."""

    path: Path
    name: str


@dataclass(slots=True, frozen=True)
class WalkEntry:
    """Filesystem entry produced by a subtree walk.

    Metadata comes from lstat, so symbolic links describe the link itself.
    """

    path: Path
    metadata: os.stat_result
    depth: int


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Immutable outcome of scanning one root entry.

    Produced exactly once per surviving root entry and owned by the result
    channel until the report stage drains it.
    """

    path: Path
    total_bytes: int
    size_class: SizeClass
    formatted_size: str
    file_count: int = 0
    degraded_count: int = 0

    @property
    def sort_key(self) -> tuple[SizeClass, str]:
        """Report ordering key: size class first, then path."""
        return (self.size_class, str(self.path))


@dataclass(slots=True, frozen=True)
class ScanReport:
    """Sorted outcome of a whole scan run."""

    results: tuple[ScanResult, ...]
    excluded: tuple[Path, ...]
    elapsed_seconds: float
    csv_path: Path | None
