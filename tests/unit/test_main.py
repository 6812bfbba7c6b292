"""Unit tests for the command-line entry point."""

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from disk_scan.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_SCAN_ERROR,
    EXIT_SUCCESS,
    __version__,
    build_config,
    main,
    parse_arguments,
)
from disk_scan.types.models import SizeMode, UnitSystem


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None, None, None]:
    """Undo the logging configuration performed by main()."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    try:
        yield
    finally:
        root_logger.handlers[:] = handlers
        root_logger.setLevel(level)


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    code = exc_info.value.code
    assert isinstance(code, int)
    return code


class TestParseArguments:
    """Test command-line parsing."""

    def test_defaults(self) -> None:
        """Unset options parse to None or False."""
        args = parse_arguments([])

        assert args.root is None
        assert args.exclude is None
        assert args.to_csv is None
        assert args.apparent_size is False
        assert args.no_color is False

    def test_repeated_and_aliased_exclusions(self) -> None:
        """--exclude, -e and --execlude all append to the same list."""
        args = parse_arguments(["-e", "a,b", "--exclude", "c", "--execlude", "d"])

        assert args.exclude == ["a,b", "c", "d"]

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """--version prints the program version."""
        with pytest.raises(SystemExit) as exc_info:
            _ = parse_arguments(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_invalid_unit_system_rejected(self) -> None:
        """Unknown unit systems are a usage error."""
        with pytest.raises(SystemExit):
            _ = parse_arguments(["--unit-system", "imperial"])


class TestBuildConfig:
    """Test merging of file and command-line settings."""

    def test_cli_only(self, tmp_path: Path) -> None:
        """Without a config file the CLI values are used directly."""
        args = parse_arguments(
            [
                "--root",
                str(tmp_path),
                "-e",
                "a,b",
                "-e",
                "c",
                "--workers",
                "2",
                "--unit-system",
                "binary",
                "--apparent-size",
                "--no-color",
            ]
        )

        config = build_config(args)

        assert config.root == tmp_path
        assert config.exclude == ("a", "b", "c")
        assert config.workers == 2
        assert config.unit_system is UnitSystem.BINARY
        assert config.size_mode is SizeMode.APPARENT
        assert config.color is False

    def test_cli_overrides_file(self, tmp_path: Path) -> None:
        """Command-line values win over the configuration file."""
        config_file = tmp_path / "disk-scan.yaml"
        _ = config_file.write_text("root: /from/file\nworkers: 8\nexclude: [cache]\n", encoding="utf-8")

        config = build_config(parse_arguments(["-c", str(config_file), "--root", str(tmp_path), "-e", "tmp"]))

        assert config.root == tmp_path
        assert config.workers == 8
        assert config.exclude == ("cache", "tmp")
        assert config.size_mode is SizeMode.DISK_USAGE
        assert config.color is True


class TestMain:
    """Test exit codes and console output of main()."""

    def test_successful_scan(self, sample_tree: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A completed scan exits 0 and prints results and the summary."""
        output = tmp_path / "report.csv"

        code = _run(
            ["--root", str(sample_tree), "-e", "c", "--apparent-size", "--no-color", "--to-csv", str(output)]
        )

        captured = capsys.readouterr()
        assert code == EXIT_SUCCESS
        assert f"   2.05 kB,{sample_tree / 'a'}" in captured.out
        assert f"report written to {output}" in captured.out
        assert "total time:" in captured.out
        assert captured.err.count("execlude file or dir:") == 1
        assert output.exists()

    def test_missing_root_option(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Running without a root is a configuration error."""
        code = _run([])

        assert code == EXIT_CONFIG_ERROR
        assert "root directory is required" in capsys.readouterr().err

    def test_invalid_config_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """An invalid configuration file exits with the configuration code."""
        config_file = tmp_path / "bad.yaml"
        _ = config_file.write_text("workers: zero\n", encoding="utf-8")

        code = _run(["--config", str(config_file)])

        assert code == EXIT_CONFIG_ERROR
        assert "Configuration error" in capsys.readouterr().err

    def test_invalid_workers_override(self, tmp_path: Path) -> None:
        """A non-positive worker count is a configuration error."""
        assert _run(["--root", str(tmp_path), "--workers", "0"]) == EXIT_CONFIG_ERROR

    def test_unlistable_root(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A root that cannot be listed exits with the scan error code."""
        code = _run(["--root", str(tmp_path / "absent")])

        assert code == EXIT_SCAN_ERROR
        assert "Cannot list root directory" in capsys.readouterr().err

    def test_unwritable_report(self, sample_tree: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A CSV that cannot be written exits with the scan error code."""
        code = _run(["--root", str(sample_tree), "--to-csv", str(tmp_path / "missing" / "r.csv")])

        assert code == EXIT_SCAN_ERROR
        assert "Failed to write CSV report" in capsys.readouterr().err
