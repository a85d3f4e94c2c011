"""Timeout constants for pipedeck.

All timeout and interval values for service requests and recurring timers.
"""

from typing import Final

# ============================================================================
# Service request timeouts (float, in seconds)
# ============================================================================

SERVICE_REQUEST_TIMEOUT: Final = 30.0

# ============================================================================
# Recurring timers (float, in seconds)
# ============================================================================

STATUS_POLL_INTERVAL: Final = 5.0
AUTOSAVE_INTERVAL: Final = 60.0

__all__ = [
    "AUTOSAVE_INTERVAL",
    "SERVICE_REQUEST_TIMEOUT",
    "STATUS_POLL_INTERVAL",
]
