"""Tests for resource parser utilities."""

from __future__ import annotations

import math

import pytest

from pipedeck.models.errors import UnparsableQuantity
from pipedeck.utils.resource_parser import (
    format_bytes,
    format_millicores,
    leading_number,
    parse_cpu,
    parse_memory,
)


class TestParseCpu:
    """Tests for parse_cpu function."""

    def test_parse_cpu_millicores(self) -> None:
        """Test parsing CPU in millicores."""
        assert parse_cpu("100m") == 100.0
        assert parse_cpu("500m") == 500.0

    def test_parse_cpu_whole_cores(self) -> None:
        """Whole and fractional cores are scaled to millicores."""
        assert parse_cpu("2") == 2000.0
        assert parse_cpu("1.5") == 1500.0
        assert parse_cpu(0.25) == 250.0

    def test_parse_cpu_micro_and_nano_cores(self) -> None:
        """Test parsing CPU in microcore/nanocore units."""
        assert parse_cpu("500000u") == pytest.approx(500.0)
        assert parse_cpu("500000000n") == pytest.approx(500.0)

    def test_parse_cpu_with_whitespace(self) -> None:
        """Test parsing CPU string with whitespace."""
        assert parse_cpu(" 100m ") == 100.0

    def test_parse_cpu_invalid_is_nan(self) -> None:
        """Unparsable values yield NaN by default."""
        assert math.isnan(parse_cpu("invalid"))
        assert math.isnan(parse_cpu(""))
        assert math.isnan(parse_cpu(None))

    def test_parse_cpu_strict_raises(self) -> None:
        """Strict parsing raises UnparsableQuantity."""
        with pytest.raises(UnparsableQuantity):
            parse_cpu("lots", strict=True)


class TestParseMemory:
    """Tests for parse_memory function."""

    def test_parse_memory_iec(self) -> None:
        """Binary suffixes use base 1024."""
        assert parse_memory("256Mi") == 256 * 1024**2
        assert parse_memory("1Gi") == 1024**3
        assert parse_memory("1024Ki") == 1024 * 1024

    def test_parse_memory_si(self) -> None:
        """Decimal suffixes use base 1000."""
        assert parse_memory("1Gb") == 1_000_000_000
        assert parse_memory("2kb") == 2000

    def test_parse_memory_single_letter_unit(self) -> None:
        """A bare M or G is read as the decimal unit."""
        assert parse_memory("512M") == 512_000_000
        assert parse_memory("1G") == 1_000_000_000

    def test_parse_memory_bytes(self) -> None:
        """Plain numbers and byte units are bytes."""
        assert parse_memory("1024") == 1024
        assert parse_memory("10 bytes") == 10
        assert parse_memory("7b") == 7

    def test_parse_memory_unknown_unit_returns_numeral(self) -> None:
        """An unknown unit keeps the raw numeral."""
        assert parse_memory("12 parsecs") == 12

    def test_parse_memory_invalid(self) -> None:
        """Unparsable memory is NaN, or raises when strict."""
        assert math.isnan(parse_memory("much"))
        with pytest.raises(UnparsableQuantity):
            parse_memory("much", strict=True)


class TestHelpers:
    """Tests for numeral helpers and formatters."""

    def test_leading_number(self) -> None:
        """Only the leading numeral is kept."""
        assert leading_number("42abc") == 42.0
        assert leading_number("-1.5") == -1.5
        assert math.isnan(leading_number("abc"))

    def test_format_millicores(self) -> None:
        """Millicores format as m below one core and cores above."""
        assert format_millicores(250) == "250m"
        assert format_millicores(1500) == "1.5 cores"
        assert format_millicores(2000) == "2 cores"
        assert format_millicores(math.nan) == "-"

    def test_format_bytes(self) -> None:
        """Bytes format with binary prefixes."""
        assert format_bytes(512) == "512B"
        assert format_bytes(256 * 1024**2) == "256Mi"
        assert format_bytes(1.5 * 1024**3) == "1.5Gi"
        assert format_bytes(math.nan) == "-"
