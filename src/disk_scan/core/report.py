"""Console and CSV reporting of scan results.

The report stage has two independent outputs fed by the same drained set of
results:

1. One console line per result, written the moment it is received. Lines
   from concurrently finishing roots interleave in completion order.
2. A final report sorted by (size class, path), written as CSV when an
   output path was requested.
"""

import csv
import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final, TextIO

from disk_scan.core.channel import ResultChannel
from disk_scan.core.errors import ReportWriteError
from disk_scan.types.models import ScanResult
from disk_scan.utils.formatting import format_duration

logger = logging.getLogger(__name__)

# Fixed CSV header: storage path, storage class, storage size
CSV_HEADER: Final[tuple[str, str, str]] = ("存储路径", "存储类型", "存储大小")

CSV_ENCODING: Final[str] = "utf-8"

# Width of the right-aligned size column in console lines
SIZE_COLUMN_WIDTH: Final[int] = 10

# ANSI escape sequences for console output
ANSI_GREEN: Final[str] = "\x1b[32m"
ANSI_CYAN: Final[str] = "\x1b[36m"
ANSI_RED_BACKGROUND: Final[str] = "\x1b[41m"
ANSI_RESET: Final[str] = "\x1b[0m"


def sort_results(results: Iterable[ScanResult]) -> list[ScanResult]:
    """Sort results by size class, then path, both ascending.

    The key is a total order over distinct root entries, so the output is
    identical for identical input regardless of arrival order.

    Args:
        results: Results in any order

    Returns:
        New list in report order
    """
    return sorted(results, key=lambda result: result.sort_key)


def csv_rows(results: Sequence[ScanResult]) -> list[tuple[str, str, str]]:
    """Build CSV data rows (path, size-class label, formatted size)."""
    return [(str(result.path), result.size_class.label, result.formatted_size) for result in results]


def write_csv(results: Sequence[ScanResult], output_path: Path) -> None:
    """Write sorted results to a CSV file.

    Args:
        results: Results already in report order
        output_path: Destination file (created or truncated)

    Raises:
        ReportWriteError: If the file cannot be created or written
    """
    try:
        with output_path.open("w", encoding=CSV_ENCODING, newline="") as f:
            writer = csv.writer(f)
            _ = writer.writerow(CSV_HEADER)
            writer.writerows(csv_rows(results))
    except OSError as exc:
        msg = f"Failed to write CSV report: {output_path}\nError: {exc}"
        raise ReportWriteError(msg, path=output_path) from exc

    logger.info(
        "CSV report written",
        extra={"path": str(output_path), "rows": len(results)},
    )


class ReportWriter:
    """Render scan results to the console and, optionally, a CSV file."""

    def __init__(
        self,
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        color: bool = True,
    ) -> None:
        """Initialize the report writer.

        Args:
            stdout: Stream for result lines and the summary (default: sys.stdout)
            stderr: Stream for excluded-entry diagnostics (default: sys.stderr)
            color: Whether to decorate lines with ANSI colours
        """
        self._stdout: TextIO = stdout or sys.stdout
        self._stderr: TextIO = stderr or sys.stderr
        self._color: bool = color

    def format_result_line(self, result: ScanResult) -> str:
        """Format one console line: right-aligned size, comma, absolute path."""
        size = f"{result.formatted_size:>{SIZE_COLUMN_WIDTH}}"
        if self._color:
            return f"{ANSI_GREEN}{size},{ANSI_CYAN}{result.path}{ANSI_RESET}"
        return f"{size},{result.path}"

    def write_result(self, result: ScanResult) -> None:
        """Write the console line for a freshly completed result."""
        _ = self._stdout.write(self.format_result_line(result) + "\n")
        self._stdout.flush()

    def write_excluded(self, path: Path) -> None:
        """Write the single diagnostic line for an excluded root entry."""
        message = f" execlude file or dir:{path}"
        if self._color:
            message = f"{ANSI_RED_BACKGROUND}{message}{ANSI_RESET}"
        _ = self._stderr.write(message + "\n")
        self._stderr.flush()

    async def drain(self, channel: ResultChannel) -> list[ScanResult]:
        """Consume every result until the channel is closed and empty.

        Each result is echoed to the console as it arrives.

        Args:
            channel: Channel fed by the aggregation tasks

        Returns:
            All received results in arrival order
        """
        received: list[ScanResult] = []
        async for result in channel:
            self.write_result(result)
            received.append(result)

        logger.debug("Result channel drained", extra={"results": len(received)})
        return received

    def write_report(self, results: Sequence[ScanResult], output_path: Path | None) -> None:
        """Write the sorted report, or state that no file was written.

        Args:
            results: Results already in report order
            output_path: CSV destination, or None to skip file output

        Raises:
            ReportWriteError: If the CSV file cannot be written
        """
        if output_path is None:
            _ = self._stdout.write("no output file requested, skipped writing report file\n")
            return

        write_csv(results, output_path)
        _ = self._stdout.write(f"report written to {output_path}\n")

    def write_elapsed(self, seconds: float) -> None:
        """Write the final wall-clock line."""
        _ = self._stdout.write(f"total time:{format_duration(seconds)}\n")
        self._stdout.flush()
