"""Resource aggregation for the pipeline gauges."""

from pipedeck.controllers.resources.aggregator import (
    ClusterCapacity,
    GaugeReadings,
    ResourceUsage,
    available_cpu,
    available_memory,
    clamp_percent,
    cluster_capacity,
    gauge_readings,
    percentage,
    required_resources,
)

__all__ = [
    "ClusterCapacity",
    "GaugeReadings",
    "ResourceUsage",
    "available_cpu",
    "available_memory",
    "clamp_percent",
    "cluster_capacity",
    "gauge_readings",
    "percentage",
    "required_resources",
]
