"""Widgets module for the pipedeck TUI.

- gauges: ResourceGauge, a labelled percentage bar
"""

from pipedeck.widgets._base import BaseWidget, StatefulWidget
from pipedeck.widgets.gauges import ResourceGauge, gauge_level

__all__ = [
    "BaseWidget",
    "ResourceGauge",
    "StatefulWidget",
    "gauge_level",
]
