"""Type definitions and protocols for disk-scan application.

This package provides:
- Data models (immutable dataclasses and enumerations)
- Protocol definitions (structural subtyping interfaces)
- Type aliases (PEP 695 modern syntax)
"""

from disk_scan.types.aliases import ExclusionSet
from disk_scan.types.models import (
    RootEntry,
    ScanPhase,
    ScanReport,
    ScanResult,
    SizeClass,
    SizeMode,
    UnitSystem,
    WalkEntry,
)
from disk_scan.types.protocols import RealSizeProbe, SizeFormatter

__all__ = [
    # Type aliases
    "ExclusionSet",
    # Data models
    "RootEntry",
    "ScanPhase",
    "ScanReport",
    "ScanResult",
    "SizeClass",
    "SizeMode",
    "UnitSystem",
    "WalkEntry",
    # Protocols
    "RealSizeProbe",
    "SizeFormatter",
]
