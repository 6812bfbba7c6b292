"""Scan orchestrator coordinating the concurrent scan-and-aggregate pipeline.

One run moves strictly forward through the scan phases:

    LISTING -> DISPATCHING -> AGGREGATING -> DRAINING -> REPORTING -> DONE

The root directory is listed, excluded entries are reported and dropped, and
one asyncio task per surviving entry aggregates its subtree on a thread and
sends the result into a bounded channel. A single consumer task drains the
channel concurrently, echoing each result as it arrives. When every producer
has finished the channel is closed, the consumer finishes draining and the
sorted report is written.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

from disk_scan.core.aggregator import AggregatorSettings, RootAggregator
from disk_scan.core.channel import ResultChannel
from disk_scan.core.config import ScanConfig
from disk_scan.core.errors import ConfigurationError, RootDirectoryError
from disk_scan.core.filesystem.exclusions import build_exclusion_set, should_exclude
from disk_scan.core.filesystem.size import probe_for_mode
from disk_scan.core.filesystem.walker import WalkerPool
from disk_scan.core.report import ReportWriter, sort_results
from disk_scan.types.aliases import ExclusionSet
from disk_scan.types.models import RootEntry, ScanPhase, ScanReport, ScanResult
from disk_scan.utils.logging import reset_scan_root, set_scan_root

__all__ = ["ScanOrchestrator", "list_root_entries"]

logger = logging.getLogger(__name__)


def list_root_entries(root: Path) -> list[RootEntry]:
    """List the immediate children of the scan root.

    Args:
        root: Absolute path of the scan root

    Returns:
        Root entries in directory order

    Raises:
        RootDirectoryError: If the root cannot be listed
    """
    try:
        with os.scandir(root) as iterator:
            return [RootEntry(path=root / entry.name, name=entry.name) for entry in iterator]
    except OSError as exc:
        msg = f"Cannot list root directory: {root}\nError: {exc}"
        raise RootDirectoryError(msg, path=root) from exc


class ScanOrchestrator:
    """Run one complete scan and report for a configured root."""

    def __init__(
        self,
        config: ScanConfig,
        *,
        writer: ReportWriter | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Validated scan configuration (root must be set)
            writer: Report writer (default: console writer honouring config.color)

        Raises:
            ConfigurationError: If no root directory is configured
        """
        if config.root is None:
            msg = "A root directory is required (use --root or set 'root' in the configuration file)"
            raise ConfigurationError(msg)

        self._config: ScanConfig = config
        self._root: Path = Path(os.path.abspath(config.root))
        self._exclusions: ExclusionSet = build_exclusion_set(config.exclude)
        self._writer: ReportWriter = writer or ReportWriter(color=config.color)
        self._settings: AggregatorSettings = AggregatorSettings(
            unit_system=config.unit_system,
            probe=probe_for_mode(config.size_mode),
        )
        self._phase: ScanPhase | None = None

    @property
    def phase(self) -> ScanPhase | None:
        """Current phase of the run (None before run() is called)."""
        return self._phase

    def _enter_phase(self, phase: ScanPhase) -> None:
        logger.debug(
            "Scan phase transition",
            extra={"from_phase": self._phase.value if self._phase else None, "to_phase": phase.value},
        )
        self._phase = phase

    async def run(self) -> ScanReport:
        """Scan every surviving root entry and write the report.

        Returns:
            Sorted scan report

        Raises:
            RootDirectoryError: If the root directory cannot be listed
            ReportWriteError: If the CSV report cannot be written
        """
        started = time.perf_counter()

        self._enter_phase(ScanPhase.LISTING)
        entries = list_root_entries(self._root)

        included: list[RootEntry] = []
        excluded: list[Path] = []
        for entry in entries:
            if should_exclude(entry, self._exclusions):
                self._writer.write_excluded(entry.path)
                excluded.append(entry.path)
            else:
                included.append(entry)

        logger.info(
            "Root directory listed",
            extra={
                "root": str(self._root),
                "entries": len(entries),
                "excluded": len(excluded),
            },
        )

        channel = ResultChannel(self._config.channel_capacity)

        with WalkerPool(self._config.workers) as pool:
            aggregator = RootAggregator(pool, self._settings)

            try:
                async with asyncio.TaskGroup() as task_group:
                    consumer = task_group.create_task(self._writer.drain(channel), name="report:drain")
                    _ = task_group.create_task(
                        self._produce(aggregator, included, channel),
                        name="scan:producers",
                    )
            except ExceptionGroup as group:
                # A failing consumer cancels the producers and vice versa; surface the root cause
                raise _first_exception(group) from group

            received = consumer.result()

        self._enter_phase(ScanPhase.REPORTING)
        results = tuple(sort_results(received))
        self._writer.write_report(results, self._config.to_csv)

        elapsed = time.perf_counter() - started
        self._writer.write_elapsed(elapsed)
        self._enter_phase(ScanPhase.DONE)

        return ScanReport(
            results=results,
            excluded=tuple(excluded),
            elapsed_seconds=elapsed,
            csv_path=self._config.to_csv,
        )

    async def _scan_entry(
        self,
        aggregator: RootAggregator,
        entry: RootEntry,
        channel: ResultChannel,
    ) -> None:
        token = set_scan_root(str(entry.path))
        try:
            result: ScanResult = await aggregator.aggregate_async(entry)
            await channel.send(result)
        finally:
            reset_scan_root(token)

    async def _produce(
        self,
        aggregator: RootAggregator,
        entries: list[RootEntry],
        channel: ResultChannel,
    ) -> None:
        self._enter_phase(ScanPhase.DISPATCHING)
        try:
            async with asyncio.TaskGroup() as task_group:
                for entry in entries:
                    _ = task_group.create_task(
                        self._scan_entry(aggregator, entry, channel),
                        name=f"scan:{entry.name}",
                    )
                self._enter_phase(ScanPhase.AGGREGATING)
        finally:
            # Every producer is done, failed or cancelled; let the consumer see end-of-stream
            channel.close()

        self._enter_phase(ScanPhase.DRAINING)


def _first_exception(group: BaseExceptionGroup[BaseException]) -> BaseException:
    """Return the first leaf exception of a possibly nested exception group."""
    first = group.exceptions[0]
    if isinstance(first, BaseExceptionGroup):
        return _first_exception(first)  # pyright: ignore[reportUnknownArgumentType]
    return first
