"""Pipeline screen configuration: widget ids, labels and glyphs."""

from __future__ import annotations

from typing import Final

TREE_ID: Final = "pipeline-tree"
TITLE_ID: Final = "pipeline-title"
GAUGE_ROW_ID: Final = "gauge-row"

# (widget id, label) in display order
GAUGES: Final[tuple[tuple[str, str], ...]] = (
    ("gauge-required-cpu", "Required CPU"),
    ("gauge-required-memory", "Required memory"),
    ("gauge-available-cpu", "Cluster CPU requested"),
    ("gauge-available-memory", "Cluster memory requested"),
)

KIND_GLYPHS: Final[dict[str, str]] = {
    "source": "◆",
    "container": "■",
    "kubernetes": "▣",
}

FILL_BAR_WIDTH: Final = 10
LINKS_LABEL: Final = "Links"
EXECUTING_SUBTITLE: Final = "executing"
IDLE_SUBTITLE: Final = "idle"
