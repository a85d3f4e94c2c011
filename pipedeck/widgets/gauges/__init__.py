"""Gauge widgets."""

from pipedeck.widgets.gauges.resource_gauge import ResourceGauge, gauge_level

__all__ = ["ResourceGauge", "gauge_level"]
