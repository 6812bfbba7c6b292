"""End-to-end scans over temporary directory trees."""

import io
import logging
import os
from collections.abc import Callable, Generator, Mapping
from pathlib import Path

import pytest

from disk_scan.__main__ import EXIT_SUCCESS, main
from disk_scan.core.config import ScanConfig
from disk_scan.core.orchestrator import ScanOrchestrator
from disk_scan.core.report import ReportWriter
from disk_scan.types.models import SizeClass, SizeMode

TreeFactory = Callable[[Path, Mapping[str, int | None]], Path]


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


def _scan(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    code = exc_info.value.code
    assert isinstance(code, int)
    return code


@pytest.mark.integration
class TestScanScenarios:
    """Full CLI runs against real directory trees."""

    def test_excluded_empty_and_populated_entries(
        self,
        sample_tree: Path,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """One exclusion line, one result line per entry, sorted CSV."""
        output = tmp_path / "report.csv"

        code = _scan(
            ["--root", str(sample_tree), "--exclude", "c", "--apparent-size", "--no-color", "--to-csv", str(output)]
        )

        captured = capsys.readouterr()
        assert code == EXIT_SUCCESS
        assert captured.err.splitlines() == [f" execlude file or dir:{sample_tree / 'c'}"]

        result_lines = [line for line in captured.out.splitlines() if "," in line]
        assert sorted(result_lines) == sorted(
            [f"       0 B,{sample_tree / 'b'}", f"   2.05 kB,{sample_tree / 'a'}"]
        )

        assert output.read_text(encoding="utf-8").splitlines() == [
            "存储路径,存储类型,存储大小",
            f"{sample_tree / 'b'},B,0 B",
            f"{sample_tree / 'a'},KiB,2.05 kB",
        ]

    def test_rerun_produces_identical_csv(self, sample_tree: Path, tmp_path: Path) -> None:
        """Scanning an unchanged tree twice writes byte-identical reports."""
        first = tmp_path / "first.csv"
        second = tmp_path / "second.csv"
        base = ["--root", str(sample_tree), "--no-color", "--workers", "3"]

        assert _scan([*base, "--to-csv", str(first)]) == EXIT_SUCCESS
        assert _scan([*base, "--to-csv", str(second)]) == EXIT_SUCCESS

        assert first.read_bytes() == second.read_bytes()

    def test_exclusion_by_full_path(
        self,
        sample_tree: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """A full path with a trailing slash excludes the matching entry."""
        code = _scan(["--root", str(sample_tree), "--no-color", "--execlude", f"{sample_tree / 'c'}/,b"])

        captured = capsys.readouterr()
        assert code == EXIT_SUCCESS
        assert len(captured.err.splitlines()) == 2
        assert str(sample_tree / "a") in captured.out
        assert f",{sample_tree / 'c'}" not in captured.out

    def test_per_entry_failures_do_not_fail_the_run(
        self,
        tmp_path: Path,
        make_tree: TreeFactory,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Broken links and vanished targets still exit successfully."""
        root = make_tree(tmp_path / "root", {"data/file.bin": 10})
        (root / "dangling").symlink_to(tmp_path / "nowhere")

        code = _scan(["--root", str(root), "--apparent-size", "--no-color"])

        captured = capsys.readouterr()
        assert code == EXIT_SUCCESS
        assert f"      10 B,{root / 'data'}" in captured.out
        assert f"       0 B,{root / 'dangling'}" in captured.out

    @pytest.mark.asyncio
    async def test_parallelism_does_not_change_totals(self, tmp_path: Path, make_tree: TreeFactory) -> None:
        """One worker and many workers produce the same report."""
        layout: dict[str, int | None] = {
            f"e{i}/d{j}/f{k}.bin": 100 * i + j + k for i in range(5) for j in range(4) for k in range(3)
        }
        root = make_tree(tmp_path / "root", layout)

        reports = []
        for workers in (1, os.cpu_count() or 4):
            config = ScanConfig(root=root, size_mode=SizeMode.APPARENT, workers=workers, color=False)
            writer = ReportWriter(stdout=io.StringIO(), stderr=io.StringIO(), color=False)
            reports.append(await ScanOrchestrator(config, writer=writer).run())

        assert reports[0].results == reports[1].results
        assert all(result.size_class is SizeClass.KIB for result in reports[0].results[1:])
