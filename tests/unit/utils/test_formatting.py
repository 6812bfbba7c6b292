"""Unit tests for formatting utilities.

Tests cover:
- Unit boundaries in the decimal and binary unit systems
- Trailing-zero trimming and precision
- Duration granularity from milliseconds to days
- Property-based testing with Hypothesis
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from disk_scan.types.models import UnitSystem
from disk_scan.utils.formatting import format_duration, format_size


class TestFormatSize:
    """Test suite for format_size function."""

    @pytest.mark.parametrize(
        ("bytes_value", "expected"),
        [
            (0, "0 B"),
            (1, "1 B"),
            (999, "999 B"),
            (1000, "1 kB"),
            (1536, "1.54 kB"),
            (2048, "2.05 kB"),
            (1_500_000, "1.5 MB"),
            (10**9, "1 GB"),
            (10**12, "1 TB"),
        ],
    )
    def test_format_size_decimal(self, bytes_value: int, expected: str) -> None:
        """Test decimal formatting at unit boundaries."""
        assert format_size(bytes_value) == expected

    @pytest.mark.parametrize(
        ("bytes_value", "expected"),
        [
            (0, "0 B"),
            (1023, "1023 B"),
            (1024, "1 KiB"),
            (1536, "1.5 KiB"),
            (2048, "2 KiB"),
            (1572864, "1.5 MiB"),
            (1024**3, "1 GiB"),
            (1024**4 * 3, "3 TiB"),
        ],
    )
    def test_format_size_binary(self, bytes_value: int, expected: str) -> None:
        """Test binary formatting at unit boundaries."""
        assert format_size(bytes_value, UnitSystem.BINARY) == expected

    def test_format_size_negative_raises_error(self) -> None:
        """Test that negative bytes raise ValueError."""
        with pytest.raises(ValueError, match="bytes must be non-negative"):
            _ = format_size(-1)

    def test_format_size_precision_parameter(self) -> None:
        """Test precision parameter limits decimal places."""
        assert format_size(2048, precision=0) == "2 kB"
        assert format_size(2048, precision=1) == "2 kB"
        assert format_size(1536, UnitSystem.BINARY, precision=3) == "1.5 KiB"

    def test_format_size_largest_unit_caps(self) -> None:
        """Values beyond the largest unit keep the largest unit."""
        assert format_size(1024**7, UnitSystem.BINARY) == "1024 EiB"

    @given(st.integers(min_value=0, max_value=2**63))
    def test_format_size_always_has_known_unit(self, bytes_value: int) -> None:
        """Property: every non-negative value renders with a known unit."""
        decimal = format_size(bytes_value)
        binary = format_size(bytes_value, UnitSystem.BINARY)

        assert decimal.split(" ")[1] in {"B", "kB", "MB", "GB", "TB", "PB", "EB"}
        assert binary.split(" ")[1] in {"B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB"}


class TestFormatDuration:
    """Test suite for format_duration function."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0ms"),
            (0.25, "250ms"),
            (1.5, "1s 500ms"),
            (2.0, "2s"),
            (59, "59s"),
            (60, "1m"),
            (90, "1m 30s"),
            (3600, "1h"),
            (3660, "1h 1m"),
            (86400, "1d"),
            (90000, "1d 1h"),
        ],
    )
    def test_format_duration_granularity(self, seconds: float, expected: str) -> None:
        """Test duration formatting across time units."""
        assert format_duration(seconds) == expected

    def test_format_duration_negative_raises_error(self) -> None:
        """Test that negative durations raise ValueError."""
        with pytest.raises(ValueError, match="seconds must be non-negative"):
            _ = format_duration(-0.5)

    @given(st.floats(min_value=0, max_value=10**7, allow_nan=False, allow_infinity=False))
    def test_format_duration_never_empty(self, seconds: float) -> None:
        """Property: any non-negative duration formats to a non-empty string."""
        assert format_duration(seconds)
