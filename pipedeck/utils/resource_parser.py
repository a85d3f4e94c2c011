"""Resource parsing utilities for CPU and memory quantities.

Converts Kubernetes-style quantity strings into normalized scalars:
- CPU: parsed to millicores (float)
- Memory: parsed to bytes (float)

Unparsable input yields ``NaN`` so callers can decide how to treat it; pass
``strict=True`` to get an ``UnparsableQuantity`` exception instead.
"""

from __future__ import annotations

import logging
import math
import re

from pipedeck.models.errors import UnparsableQuantity

logger = logging.getLogger(__name__)

# Leading numeric literal, the same prefix a lenient float parse would accept.
_NUMERAL_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")

# Unit tables for parse_memory(). Position in the table is the exponent.
_SI_UNITS: tuple[str, ...] = ("b", "kb", "mb", "gb", "tb", "pb", "eb", "zb", "yb")
_IEC_UNITS: tuple[str, ...] = ("b", "ki", "mi", "gi", "ti", "pi", "ei", "zi", "yi")
_SI_BASE = 1000
_IEC_BASE = 1024

# CPU suffix divisors applied after the whole-core scale.
_CPU_SUFFIX_DIVISORS: dict[str, int] = {
    "m": 1000,
    "u": 1_000_000,
    "n": 1_000_000_000,
}

_BYTE_LABELS: tuple[str, ...] = ("B", "Ki", "Mi", "Gi", "Ti", "Pi")


def _split_quantity(value: object) -> tuple[float, str] | None:
    """Split a quantity into its leading numeral and lower-cased unit text."""
    if value is None:
        return None
    text = str(value).strip()
    match = _NUMERAL_RE.match(text)
    if match is None:
        return None
    return float(match.group(1)), text[match.end():].strip().lower()


def _unparsable(value: object, strict: bool) -> float:
    if strict:
        raise UnparsableQuantity(value)
    return math.nan


def parse_cpu(value: object, *, strict: bool = False) -> float:
    """Parse a CPU quantity to millicores.

    The leading numeral is scaled by 1000 so that whole cores become
    millicores. An ``m`` suffix marks a value that is already in millicores
    and is divided back down; ``u`` and ``n`` are handled the same way.

    - Whole cores: "2" -> 2000.0
    - Decimal: "1.5" -> 1500.0
    - Millicores: "500m" -> 500.0
    - Microcores: "500000u" -> 500.0
    - Nanocores: "500000000n" -> 500.0

    Args:
        value: CPU quantity (e.g., "500m", "2").
        strict: Raise instead of returning NaN on unparsable input.

    Returns:
        CPU value in millicores, or NaN when no numeral can be extracted.

    Raises:
        UnparsableQuantity: If ``strict`` and the value has no numeral.
    """
    parts = _split_quantity(value)
    if parts is None:
        return _unparsable(value, strict)

    number, unit = parts
    millicores = number * 1000
    divisor = _CPU_SUFFIX_DIVISORS.get(unit[:1])
    if divisor is not None:
        millicores /= divisor
    return millicores


def _memory_unit_code(unit: str) -> str:
    """Reduce trailing unit text to the two-letter lookup code."""
    code = unit[:2]
    return "b" if code == "by" else code


def parse_memory(value: object, *, strict: bool = False) -> float:
    """Parse a memory quantity to bytes.

    The unit code is the first two letters of the trailing text ("bytes"
    collapses to "b"). It is looked up in the SI table (base 1000) and then
    the IEC table (base 1024); a single-letter code such as "M" is retried
    as "mb" against the SI table.

    - IEC: "256Mi" -> 268435456.0
    - SI: "1Gb" -> 1000000000.0, "512M" -> 512000000.0
    - Plain: "1024" -> 1024.0

    Args:
        value: Memory quantity (e.g., "256Mi", "1Gb").
        strict: Raise instead of returning NaN on unparsable input.

    Returns:
        Memory value in bytes, or NaN when no numeral can be extracted.

    Raises:
        UnparsableQuantity: If ``strict`` and the value has no numeral.
    """
    parts = _split_quantity(value)
    if parts is None:
        return _unparsable(value, strict)

    number, unit = parts
    code = _memory_unit_code(unit)
    if not code:
        return number

    if code in _SI_UNITS:
        return number * _SI_BASE ** _SI_UNITS.index(code)
    if code in _IEC_UNITS:
        return number * _IEC_BASE ** _IEC_UNITS.index(code)

    code = f"{code}b"
    if code in _SI_UNITS:
        return number * _SI_BASE ** _SI_UNITS.index(code)

    logger.debug(f"Unknown memory unit in {value!r}, using raw numeral")
    return number


def leading_number(value: object) -> float:
    """Return the leading numeral of a value with any unit text ignored, or NaN."""
    parts = _split_quantity(value)
    return math.nan if parts is None else parts[0]


def format_millicores(millicores: float) -> str:
    """Format millicores for display ("250m", "1.5 cores")."""
    if math.isnan(millicores):
        return "-"
    if millicores < 1000:
        return f"{millicores:.0f}m"
    return f"{millicores / 1000:.2f}".rstrip("0").rstrip(".") + " cores"


def format_bytes(num_bytes: float) -> str:
    """Format bytes with binary prefixes ("256Mi", "1.5Gi")."""
    if math.isnan(num_bytes):
        return "-"
    value = float(num_bytes)
    label = _BYTE_LABELS[0]
    for label in _BYTE_LABELS:
        if abs(value) < 1024 or label == _BYTE_LABELS[-1]:
            break
        value /= 1024
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text}{label}"
