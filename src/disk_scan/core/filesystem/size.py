"""Per-file size probes, size classification and the degrade-to-zero policy."""

import logging
import os
import stat
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Final

from disk_scan.types.models import SizeClass, SizeMode
from disk_scan.types.protocols import RealSizeProbe

logger = logging.getLogger(__name__)

# st_blocks is reported in 512-byte units on every platform that provides it
BLOCK_UNIT_BYTES: Final[int] = 512


def real_size(path: Path, metadata: os.stat_result) -> int:  # noqa: ARG001
    """Return the bytes a file actually occupies on disk.

    Uses allocated blocks, so sparse files count less than their logical
    length and small files count a whole filesystem block. Platforms without
    ``st_blocks`` (Windows) fall back to the logical size.

    Args:
        path: File path (unused by the block-based probe, part of the probe contract)
        metadata: lstat result for the file

    Returns:
        Allocated size in bytes
    """
    blocks: int | None = getattr(metadata, "st_blocks", None)
    if blocks is None:
        return metadata.st_size
    return blocks * BLOCK_UNIT_BYTES


def apparent_size(path: Path, metadata: os.stat_result) -> int:  # noqa: ARG001
    """Return the logical size of a file."""
    return metadata.st_size


def probe_for_mode(mode: SizeMode) -> RealSizeProbe:
    """Select the size probe for a size calculation mode."""
    if mode == SizeMode.APPARENT:
        return apparent_size
    return real_size


def is_regular_file(metadata: os.stat_result) -> bool:
    """Check lstat metadata for a regular file (not a link, dir or special file)."""
    return stat.S_ISREG(metadata.st_mode)


def classify_size(total_bytes: int) -> SizeClass:
    """Classify a byte total into a magnitude bucket.

    A total strictly greater than ``1024 ** k`` is classified at unit ``k``.
    Exact powers of 1024 therefore fall to the lower unit: 1024 bytes is
    ``B`` while 1025 bytes is ``KiB``.

    Args:
        total_bytes: Non-negative byte total

    Returns:
        Size class of the total

    Examples:
        >>> classify_size(1024)
        <SizeClass.B: 0>
        >>> classify_size(1025)
        <SizeClass.KIB: 1>
    """
    if total_bytes < 0:
        msg = "total_bytes must be non-negative"
        raise ValueError(msg)

    for size_class in reversed(SizeClass):
        if size_class is not SizeClass.B and total_bytes > size_class.threshold:
            return size_class

    return SizeClass.B


class DegradeToZero:
    """Policy turning a failed size probe into a zero-byte contribution.

    Unreadable or vanished files must not abort an aggregation. Every
    degradation is counted so callers (and tests) can see how many files
    were silently dropped from a total.
    """

    def __init__(self) -> None:
        self._degraded: int = 0
        self._lock: threading.Lock = threading.Lock()

    @property
    def degraded(self) -> int:
        """Number of probes that failed and counted as zero."""
        return self._degraded

    def apply(
        self,
        probe: Callable[[Path, os.stat_result], int],
        path: Path,
        metadata: os.stat_result,
    ) -> int:
        """Run a size probe, counting zero bytes if it raises OSError.

        Args:
            probe: Size probe to run
            path: File path
            metadata: lstat result for the file

        Returns:
            Probe result, or 0 when the probe failed
        """
        try:
            return probe(path, metadata)
        except OSError as exc:
            with self._lock:
                self._degraded += 1
            logger.debug(
                "Size probe failed, counting zero bytes",
                extra={"path": str(path), "error": str(exc)},
            )
            return 0
