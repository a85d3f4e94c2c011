"""Scalar constants for pipedeck.

All application-level constants with proper type hints using Final.
"""

from typing import Final

# ============================================================================
# Application
# ============================================================================

APP_TITLE: Final = "pipedeck"

# ============================================================================
# Persistence layout
# ============================================================================

PIPELINE_BUCKET: Final = "pipeline"
FILES_BUCKET: Final = "files"
UNTITLED_PIPELINE: Final = "Untitled"
API_PREFIX: Final = "/api/v1"

# ============================================================================
# Status colors (hex strings, as painted on the diagram)
# ============================================================================

COLOR_RED: Final = "#FF0000"
COLOR_BLUE: Final = "#0000FF"
COLOR_GREEN: Final = "#00FF00"
COLOR_BROWN: Final = "#7A581D"
COLOR_ORANGE: Final = "#D66304"
COLOR_BLACK: Final = "#000"

# ============================================================================
# Gauge bounds (percent)
# ============================================================================

GAUGE_FLOOR: Final = 0.0001
GAUGE_CEILING: Final = 99.9999

# ============================================================================
# Node ports
# ============================================================================

IN_PORTS: Final = ("a", "b", "c")
OUT_PORTS: Final = ("o",)

__all__ = [
    "API_PREFIX",
    "APP_TITLE",
    "COLOR_BLACK",
    "COLOR_BLUE",
    "COLOR_BROWN",
    "COLOR_GREEN",
    "COLOR_ORANGE",
    "COLOR_RED",
    "FILES_BUCKET",
    "GAUGE_CEILING",
    "GAUGE_FLOOR",
    "IN_PORTS",
    "OUT_PORTS",
    "PIPELINE_BUCKET",
    "UNTITLED_PIPELINE",
]
