"""Filesystem operations module for subtree walking, exclusions and size probes."""

from disk_scan.core.filesystem.exclusions import (
    build_exclusion_set,
    normalize_exclusion,
    should_exclude,
)
from disk_scan.core.filesystem.size import (
    DegradeToZero,
    apparent_size,
    classify_size,
    real_size,
)
from disk_scan.core.filesystem.walker import SubtreeWalker, WalkerPool, WalkStats

__all__ = [
    "DegradeToZero",
    "SubtreeWalker",
    "WalkStats",
    "WalkerPool",
    "apparent_size",
    "build_exclusion_set",
    "classify_size",
    "normalize_exclusion",
    "real_size",
    "should_exclude",
]
