"""Application entry point and CLI for disk-scan.

This module implements the main entry point for the disk-scan application,
providing CLI argument parsing, configuration loading, logging setup, and
running the scan orchestrator to completion.

Exit codes:
- 0: Scan completed (per-entry failures never change this)
- 1: Configuration error (invalid file, environment variable, exclusion)
- 2: Scan error (root cannot be listed, CSV cannot be written)
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Final, NoReturn

from disk_scan.core.config import ScanConfig, load_config
from disk_scan.core.errors import ConfigurationError, EnvironmentVariableError, ScanError
from disk_scan.core.orchestrator import ScanOrchestrator
from disk_scan.types.models import ScanReport, SizeMode, UnitSystem
from disk_scan.utils.logging import configure_logging

__all__ = ["main"]

__version__: Final[str] = "0.0.2"

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_SCAN_ERROR = 2


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for disk-scan application.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace containing scan options

    CLI Arguments:
        --root, -r: Directory whose immediate children are scanned
        --exclude, -e: Comma-separated names or full paths to skip (repeatable)
        --to-csv: Write the sorted report as CSV
        --config, -c: Optional YAML configuration file
        --workers, -w: Traversal worker threads
        --unit-system: Units for human-readable sizes
        --apparent-size: Count logical file size instead of disk usage
        --no-color: Disable ANSI colours
        --log-level: Logging level
    """
    parser = argparse.ArgumentParser(
        prog="disk-scan",
        description="磁盘扫描工具: 高性能扫描文件夹下所有文件的总占用 (per-directory disk usage)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  disk-scan --root /data
  disk-scan --root /data --exclude node_modules,/data/backups
  disk-scan --root /data --to-csv report.csv
  disk-scan --config disk-scan.yaml --log-level DEBUG
        """,
    )

    _ = parser.add_argument(
        "--root",
        "-r",
        type=Path,
        help="Directory whose immediate children are scanned (required unless set in config)",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--exclude",
        "--execlude",
        "-e",
        action="append",
        help="Comma-separated entry names or full paths to skip (may be repeated)",
        metavar="LIST",
    )

    _ = parser.add_argument(
        "--to-csv",
        type=Path,
        help="Write the sorted report as CSV to this path",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to YAML configuration file",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--workers",
        "-w",
        type=int,
        help="Traversal worker threads (default: available CPUs)",
        metavar="N",
    )

    _ = parser.add_argument(
        "--unit-system",
        choices=[unit.value for unit in UnitSystem],
        help="Units for human-readable sizes (default: decimal)",
    )

    _ = parser.add_argument(
        "--apparent-size",
        action="store_true",
        help="Count logical file size instead of allocated disk usage",
    )

    _ = parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colours in console output",
    )

    _ = parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level from configuration",
        metavar="LEVEL",
    )

    _ = parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScanConfig:
    """Build the effective configuration from the file and CLI overrides.

    Args:
        args: Parsed command-line arguments

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the configuration file or overrides are invalid
    """
    # Extract args with type annotations to avoid reportAny at argparse boundary
    config_path: Path | None = args.config  # pyright: ignore[reportAny]  # argparse boundary
    exclude: list[str] | None = args.exclude  # pyright: ignore[reportAny]  # argparse boundary
    apparent: bool = args.apparent_size  # pyright: ignore[reportAny]  # argparse boundary
    no_color: bool = args.no_color  # pyright: ignore[reportAny]  # argparse boundary

    base = load_config(config_path) if config_path is not None else ScanConfig()

    return base.merged(
        root=args.root,  # pyright: ignore[reportAny]  # argparse boundary
        exclude=exclude,
        to_csv=args.to_csv,  # pyright: ignore[reportAny]  # argparse boundary
        workers=args.workers,  # pyright: ignore[reportAny]  # argparse boundary
        unit_system=args.unit_system,  # pyright: ignore[reportAny]  # argparse boundary
        size_mode=SizeMode.APPARENT if apparent else None,
        color=False if no_color else None,
        log_level=args.log_level,  # pyright: ignore[reportAny]  # argparse boundary
    )


async def async_main(config: ScanConfig) -> ScanReport:
    """Async main function running one scan.

    Args:
        config: Validated scan configuration

    Returns:
        Sorted scan report

    Raises:
        ConfigurationError: If the configuration lacks a root or has bad exclusions
        ScanError: If the root cannot be listed or the report cannot be written
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "Disk scan starting",
        extra={
            "root": str(config.root),
            "exclusions": list(config.exclude),
            "workers": config.workers,
        },
    )

    orchestrator = ScanOrchestrator(config)
    report = await orchestrator.run()

    logger.info(
        "Disk scan complete",
        extra={
            "results": len(report.results),
            "excluded": len(report.excluded),
            "elapsed_seconds": report.elapsed_seconds,
        },
    )
    return report


def main(argv: Sequence[str] | None = None) -> NoReturn:
    """Main entry point for disk-scan application.

    Parses command-line arguments, loads configuration, sets up logging,
    runs the scan and exits with a status code.

    Args:
        argv: Argument list (defaults to sys.argv[1:])
    """
    args = parse_arguments(argv)

    try:
        config = build_config(args)
        configure_logging(log_level=config.log_level)
        _ = asyncio.run(async_main(config))

    except ConfigurationError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    except EnvironmentVariableError as exc:
        print(f"Environment variable error:\n{exc}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    except ScanError as exc:
        print(f"Scan error:\n{exc}", file=sys.stderr)
        sys.exit(EXIT_SCAN_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(EXIT_SCAN_ERROR)

    except Exception as exc:
        # Unexpected error with stack trace
        print(f"Unexpected error: {exc}", file=sys.stderr)
        logging.exception("Unexpected error during scan")
        sys.exit(EXIT_SCAN_ERROR)

    sys.exit(EXIT_SUCCESS)


if __name__ == "__main__":
    main()
