"""Utility functions for pipedeck."""

from pipedeck.utils.periodic_task import PeriodicTask
from pipedeck.utils.resource_parser import (
    format_bytes,
    format_millicores,
    leading_number,
    parse_cpu,
    parse_memory,
)

__all__ = [
    "PeriodicTask",
    "format_bytes",
    "format_millicores",
    "leading_number",
    "parse_cpu",
    "parse_memory",
]
