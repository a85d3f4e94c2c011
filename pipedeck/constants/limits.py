"""Limit and threshold constants for pipedeck.

All limit values and validation ranges.
"""

from typing import Final

# ============================================================================
# Validation limits
# ============================================================================

POLL_INTERVAL_MIN: Final = 1.0
AUTOSAVE_INTERVAL_MIN: Final = 5.0
SCALE_MIN: Final = 0

__all__ = [
    "AUTOSAVE_INTERVAL_MIN",
    "POLL_INTERVAL_MIN",
    "SCALE_MIN",
]
