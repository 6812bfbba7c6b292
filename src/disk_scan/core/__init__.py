"""Core scan pipeline: aggregation, result channel, reporting and orchestration."""

from disk_scan.core.aggregator import AggregatorSettings, RootAggregator
from disk_scan.core.channel import ChannelClosedError, ResultChannel
from disk_scan.core.orchestrator import ScanOrchestrator
from disk_scan.core.report import ReportWriter, sort_results, write_csv

__all__ = [
    "AggregatorSettings",
    "ChannelClosedError",
    "ReportWriter",
    "ResultChannel",
    "RootAggregator",
    "ScanOrchestrator",
    "sort_results",
    "write_csv",
]
