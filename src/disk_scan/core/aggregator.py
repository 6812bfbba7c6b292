"""Per-root aggregation of on-disk usage.

A RootAggregator turns one root entry into one ScanResult: it walks the
entry's subtree, keeps regular files, probes each file's size under the
degrade-to-zero policy and sums the sizes. Summation is order-independent,
so the walker's unordered, parallel output yields the same total every time.

The synchronous aggregate() is designed to be offloaded to a thread with
asyncio.to_thread so the event loop stays free to drain results.
"""

import asyncio
import logging
from dataclasses import dataclass

from disk_scan.core.filesystem.size import (
    DegradeToZero,
    classify_size,
    is_regular_file,
    real_size,
)
from disk_scan.core.filesystem.walker import SubtreeWalker, WalkerPool, WalkStats
from disk_scan.types.models import RootEntry, ScanResult, UnitSystem
from disk_scan.types.protocols import RealSizeProbe, SizeFormatter
from disk_scan.utils.formatting import format_size
from disk_scan.utils.logging import log_with_context

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AggregatorSettings:
    """Immutable per-run settings handed to every aggregation task."""

    unit_system: UnitSystem = UnitSystem.DECIMAL
    probe: RealSizeProbe = real_size
    formatter: SizeFormatter = format_size


class RootAggregator:
    """Reduce the subtree of a root entry to a single classified total."""

    def __init__(
        self,
        pool: WalkerPool,
        settings: AggregatorSettings | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            pool: Shared worker pool used by the subtree walker
            settings: Size probe and display settings (defaults if None)
        """
        self._walker: SubtreeWalker = SubtreeWalker(pool)
        self._settings: AggregatorSettings = settings or AggregatorSettings()

    def aggregate(self, root_entry: RootEntry) -> ScanResult:
        """Compute the on-disk usage of one root entry.

        Never raises for filesystem problems: unreadable entries are left out
        by the walker and failing size probes count as zero bytes.

        Args:
            root_entry: Root entry to aggregate

        Returns:
            ScanResult for the entry
        """
        stats = WalkStats()
        policy = DegradeToZero()
        total_bytes = 0
        file_count = 0

        for entry in self._walker.walk(root_entry.path, stats):
            if not is_regular_file(entry.metadata):
                continue
            file_count += 1
            total_bytes += policy.apply(self._settings.probe, entry.path, entry.metadata)

        size_class = classify_size(total_bytes)
        result = ScanResult(
            path=root_entry.path,
            total_bytes=total_bytes,
            size_class=size_class,
            formatted_size=self._settings.formatter(total_bytes, self._settings.unit_system),
            file_count=file_count,
            degraded_count=policy.degraded + stats.errors,
        )

        log_with_context(
            logger,
            logging.DEBUG,
            "Root aggregation complete",
            extra={
                "total_bytes": total_bytes,
                "size_class": size_class.label,
                "files": file_count,
                "walked_entries": stats.entries,
                "walk_errors": stats.errors,
                "degraded_probes": policy.degraded,
            },
        )

        return result

    async def aggregate_async(self, root_entry: RootEntry) -> ScanResult:
        """Async wrapper for aggregate using asyncio.to_thread.

        Context variables (such as the current scan root used for logging)
        are copied into the worker thread.

        Args:
            root_entry: Root entry to aggregate

        Returns:
            ScanResult for the entry
        """
        return await asyncio.to_thread(self.aggregate, root_entry)
