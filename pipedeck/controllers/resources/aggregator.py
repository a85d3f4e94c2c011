"""Resource aggregation: what the pipeline needs versus what the cluster has.

All results are percentages clamped into ``[GAUGE_FLOOR, GAUGE_CEILING]`` so
that gauges never render empty or overflowing.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel

from pipedeck.constants.values import GAUGE_CEILING, GAUGE_FLOOR
from pipedeck.models.graph import ContainerNode, PipelineGraph
from pipedeck.models.telemetry import TelemetrySnapshot
from pipedeck.utils.resource_parser import parse_cpu, parse_memory

logger = logging.getLogger(__name__)


class ResourceUsage(BaseModel):
    """CPU and memory as percentages of cluster capacity."""

    cpu: float
    mem: float


class ClusterCapacity(BaseModel):
    """Cluster totals summed over all nodes."""

    cpu: float = 0.0  # millicores
    memory: float = 0.0  # bytes
    cpu_requests: float = 0.0  # millicores
    memory_requests: float = 0.0  # bytes


class GaugeReadings(BaseModel):
    """The four gauge values shown next to the diagram."""

    required_cpu: float = GAUGE_FLOOR
    required_memory: float = GAUGE_FLOOR
    available_cpu: float = GAUGE_FLOOR
    available_memory: float = GAUGE_FLOOR


def clamp_percent(value: float) -> float:
    """Clamp a percentage into the gauge range; NaN counts as empty."""
    if math.isnan(value) or value <= GAUGE_FLOOR:
        return GAUGE_FLOOR
    if value >= GAUGE_CEILING:
        return GAUGE_CEILING
    return value


def percentage(part: float, whole: float) -> float:
    if math.isnan(whole) or whole <= 0:
        return GAUGE_FLOOR
    return clamp_percent(part / whole * 100)


def _counted(value: float, label: str) -> float:
    if math.isnan(value):
        logger.debug(f"Unparsable {label}, counting as zero")
        return 0.0
    return value


def cluster_capacity(snapshot: TelemetrySnapshot | None) -> ClusterCapacity:
    if snapshot is None:
        return ClusterCapacity()
    return ClusterCapacity(
        cpu=snapshot.total("cpucapacity"),
        memory=snapshot.total("memorycapacity"),
        cpu_requests=snapshot.total("cpurequests"),
        memory_requests=snapshot.total("memoryrequests"),
    )


def required_resources(graph: PipelineGraph, capacity: ClusterCapacity) -> ResourceUsage:
    """Resources the pipeline asks for once every group is scaled.

    Each container embedded in a group contributes its CPU and memory
    multiplied by the group's ``scale``.

    Args:
        graph: Pipeline to measure.
        capacity: Cluster totals to measure against.

    Returns:
        ResourceUsage with clamped cpu and mem percentages.
    """
    cpu = 0.0
    mem = 0.0
    for group in graph.groups():
        for child in graph.children(group.id):
            if not isinstance(child, ContainerNode):
                continue
            cpu += _counted(parse_cpu(child.cpu), f"cpu {child.cpu!r} on {child.id}") * group.scale
            mem += _counted(
                parse_memory(child.memory), f"memory {child.memory!r} on {child.id}"
            ) * group.scale

    return ResourceUsage(
        cpu=percentage(cpu, capacity.cpu),
        mem=percentage(mem, capacity.memory),
    )


def available_cpu(snapshot: TelemetrySnapshot | None) -> float:
    """Requested CPU over cluster CPU capacity, as a clamped percentage."""
    capacity = cluster_capacity(snapshot)
    return percentage(capacity.cpu_requests, capacity.cpu)


def available_memory(snapshot: TelemetrySnapshot | None) -> float:
    """Requested memory over cluster memory capacity, as a clamped percentage."""
    capacity = cluster_capacity(snapshot)
    return percentage(capacity.memory_requests, capacity.memory)


def gauge_readings(graph: PipelineGraph, snapshot: TelemetrySnapshot | None) -> GaugeReadings:
    capacity = cluster_capacity(snapshot)
    required = required_resources(graph, capacity)
    return GaugeReadings(
        required_cpu=required.cpu,
        required_memory=required.mem,
        available_cpu=percentage(capacity.cpu_requests, capacity.cpu),
        available_memory=percentage(capacity.memory_requests, capacity.memory),
    )
