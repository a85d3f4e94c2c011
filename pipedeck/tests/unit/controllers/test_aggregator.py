"""Tests for resource aggregation behind the gauges."""

from __future__ import annotations

import math

import pytest

from pipedeck.constants.values import GAUGE_CEILING, GAUGE_FLOOR
from pipedeck.controllers.resources import (
    ClusterCapacity,
    available_cpu,
    available_memory,
    clamp_percent,
    cluster_capacity,
    gauge_readings,
    percentage,
    required_resources,
)
from pipedeck.models.graph import ContainerNode, KubernetesGroup, PipelineGraph
from pipedeck.models.telemetry import TelemetrySnapshot

GIB = 1024**3


def _graph(cpu: str = "500m", memory: str = "256Mi", scale: int = 2) -> PipelineGraph:
    graph = PipelineGraph(title="g")
    group = graph.add_node(KubernetesGroup(scale=scale))
    child = graph.add_node(ContainerNode(cpu=cpu, memory=memory))
    graph.embed(group, child)
    # Containers outside any group are not deployed and do not count.
    graph.add_node(ContainerNode(cpu="8", memory="8Gi"))
    return graph


def _snapshot(**node: float) -> TelemetrySnapshot:
    return TelemetrySnapshot.from_payload({"nodes": {"n1": node}})


class TestClamp:
    """Tests for clamp_percent and percentage."""

    @pytest.mark.parametrize(
        "value, expected",
        [(-5, GAUGE_FLOOR), (0, GAUGE_FLOOR), (42.5, 42.5), (100, GAUGE_CEILING), (250, GAUGE_CEILING)],
    )
    def test_clamp_percent(self, value: float, expected: float) -> None:
        """Values are kept inside the open gauge range."""
        assert clamp_percent(value) == expected

    def test_clamp_nan(self) -> None:
        """NaN reads as empty."""
        assert clamp_percent(math.nan) == GAUGE_FLOOR

    def test_percentage_of_zero_capacity(self) -> None:
        """Zero or unknown capacity gives the floor instead of dividing by zero."""
        assert percentage(10, 0) == GAUGE_FLOOR
        assert percentage(10, math.nan) == GAUGE_FLOOR


class TestRequiredResources:
    """Tests for required_resources."""

    def test_scaled_group_against_cluster(self) -> None:
        """500m x2 on 4000m is 25%; 256Mi x2 on 4Gi is 12.5%."""
        usage = required_resources(_graph(), ClusterCapacity(cpu=4000, memory=4 * GIB))
        assert usage.cpu == pytest.approx(25.0)
        assert usage.mem == pytest.approx(12.5)

    def test_stays_in_range(self) -> None:
        """Oversized and tiny requests are clamped."""
        capacity = ClusterCapacity(cpu=1000, memory=GIB)
        big = required_resources(_graph(cpu="64", memory="64Gi"), capacity)
        assert big.cpu == GAUGE_CEILING and big.mem == GAUGE_CEILING
        tiny = required_resources(_graph(cpu="1n", memory="1"), capacity)
        assert GAUGE_FLOOR <= tiny.cpu <= GAUGE_CEILING
        assert GAUGE_FLOOR <= tiny.mem <= GAUGE_CEILING

    def test_unparsable_quantity_counts_as_zero(self) -> None:
        """A container with unreadable cpu contributes nothing."""
        usage = required_resources(_graph(cpu="abc"), ClusterCapacity(cpu=4000, memory=4 * GIB))
        assert usage.cpu == GAUGE_FLOOR
        assert usage.mem == pytest.approx(12.5)

    def test_scale_zero_requires_nothing(self) -> None:
        """A group scaled to zero needs no resources."""
        usage = required_resources(_graph(scale=0), ClusterCapacity(cpu=4000, memory=4 * GIB))
        assert usage.cpu == GAUGE_FLOOR


class TestClusterGauges:
    """Tests for cluster-wide gauges."""

    def test_capacity_without_snapshot(self) -> None:
        """No telemetry means zero capacity and floor readings."""
        assert cluster_capacity(None) == ClusterCapacity()
        assert available_cpu(None) == GAUGE_FLOOR
        assert available_memory(None) == GAUGE_FLOOR

    def test_requested_share(self) -> None:
        """Requests are shown as a share of capacity."""
        snapshot = _snapshot(
            cpucapacity=4000, cpurequests=1000, memorycapacity=4 * GIB, memoryrequests=GIB
        )
        assert available_cpu(snapshot) == pytest.approx(25.0)
        assert available_memory(snapshot) == pytest.approx(25.0)

    def test_gauge_readings(self) -> None:
        """All four gauges are computed together."""
        snapshot = _snapshot(
            cpucapacity=4000, cpurequests=2000, memorycapacity=4 * GIB, memoryrequests=GIB
        )
        readings = gauge_readings(_graph(), snapshot)
        assert readings.required_cpu == pytest.approx(25.0)
        assert readings.required_memory == pytest.approx(12.5)
        assert readings.available_cpu == pytest.approx(50.0)
        assert readings.available_memory == pytest.approx(25.0)
