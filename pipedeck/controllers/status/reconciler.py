"""Status reconciliation: telemetry snapshot to per-node visual state.

Groups are painted by their reported state. Each container embedded in a
group gets a fill bar whose width is the share of expected replicas seen in
telemetry and whose color flags waiting or terminated replicas.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, Field

from pipedeck.constants.enums import ContainerState, GroupState
from pipedeck.constants.values import (
    COLOR_BLACK,
    COLOR_BLUE,
    COLOR_BROWN,
    COLOR_GREEN,
    COLOR_ORANGE,
    COLOR_RED,
)
from pipedeck.models.graph import ContainerNode, KubernetesGroup, PipelineGraph
from pipedeck.models.telemetry import GroupStatus, TelemetrySnapshot

logger = logging.getLogger(__name__)

GROUP_STATE_COLORS: dict[str, str] = {
    GroupState.FAILED.value: COLOR_RED,
    GroupState.READY.value: COLOR_BLUE,
    GroupState.RUNNING.value: COLOR_BLUE,
    GroupState.BUSY.value: COLOR_GREEN,
    GroupState.EXECUTING.value: COLOR_GREEN,
    GroupState.TERMINATED.value: COLOR_BROWN,
    GroupState.TERMINATING.value: COLOR_BROWN,
    GroupState.CREATING.value: COLOR_ORANGE,
    GroupState.PENDING.value: COLOR_ORANGE,
}

# Replicas in these states are also counted as running.
_RUNNING_ALIASES = frozenset({ContainerState.READY.value, ContainerState.BUSY.value})


class ContainerCounts(BaseModel):
    """Replica tally for one container across a group's pods."""

    waiting: int = 0
    running: int = 0
    terminated: int = 0
    ready: int = 0
    busy: int = 0

    def add(self, state: str) -> None:
        if state == ContainerState.WAITING.value:
            self.waiting += 1
        elif state == ContainerState.RUNNING.value:
            self.running += 1
        elif state == ContainerState.TERMINATED.value:
            self.terminated += 1
        elif state == ContainerState.READY.value:
            self.ready += 1
        elif state == ContainerState.BUSY.value:
            self.busy += 1
        if state in _RUNNING_ALIASES:
            self.running += 1

    @property
    def seen(self) -> int:
        return self.waiting + self.running + self.terminated


class ContainerFill(BaseModel):
    """Fill bar for one container: width in percent and its color."""

    width: int = 0
    color: str = COLOR_GREEN
    counts: ContainerCounts = Field(default_factory=ContainerCounts)


class ReconcileResult(BaseModel):
    status: str = ""
    group_colors: dict[str, str] = Field(default_factory=dict)
    container_fills: dict[str, ContainerFill] = Field(default_factory=dict)


class VisualState(BaseModel):
    """Last painted state of every node.

    ``merge`` overwrites what a new result reports and keeps everything
    else, so a group that drops out of one poll keeps its last color.
    """

    status: str = ""
    group_colors: dict[str, str] = Field(default_factory=dict)
    container_fills: dict[str, ContainerFill] = Field(default_factory=dict)

    def merge(self, result: ReconcileResult) -> None:
        self.status = result.status
        self.group_colors.update(result.group_colors)
        self.container_fills.update(result.container_fills)

    def prune(self, graph: PipelineGraph) -> None:
        """Forget nodes that are no longer in the graph."""
        self.group_colors = {k: v for k, v in self.group_colors.items() if k in graph}
        self.container_fills = {k: v for k, v in self.container_fills.items() if k in graph}

    def reset(self) -> None:
        self.status = ""
        self.group_colors.clear()
        self.container_fills.clear()


def group_color(state: str) -> str:
    return GROUP_STATE_COLORS.get(state, COLOR_BLACK)


def tally_containers(group: GroupStatus, container_ids: list[str]) -> dict[str, ContainerCounts]:
    """Count replica states for each container id over all of a group's pods.

    Entries whose id is not one of ``container_ids`` are ignored; ids with no
    entries keep zero counts.
    """
    counts = {cid: ContainerCounts() for cid in container_ids}
    for pod in group.pods.values():
        for entry in pod.containers.values():
            bucket = counts.get(entry.id)
            if bucket is None:
                continue
            bucket.add(entry.state)
    return counts


def container_fill(counts: ContainerCounts, expected: int) -> ContainerFill:
    """Derive a fill bar from replica counts and the expected replica total.

    Green by default, blue when more replicas wait than run, red as soon as
    any replica terminated. A group expecting no replicas shows an empty bar.
    """
    width = math.floor(counts.seen / expected * 100) if expected > 0 else 0
    color = COLOR_GREEN
    if counts.waiting > counts.running:
        color = COLOR_BLUE
    if counts.terminated > 0:
        color = COLOR_RED
    return ContainerFill(width=width, color=color, counts=counts)


def reconcile(graph: PipelineGraph, snapshot: TelemetrySnapshot) -> ReconcileResult:
    """Map a telemetry snapshot onto the graph.

    Groups are walked in telemetry order; ids not present in the graph are
    skipped. Groups in the graph without telemetry are absent from the result.
    """
    result = ReconcileResult(status=snapshot.status)
    for group_id, group_status in snapshot.groups.items():
        group = graph.get_node(group_id)
        if not isinstance(group, KubernetesGroup):
            logger.debug(f"Telemetry for unknown group {group_id}, skipping")
            continue

        result.group_colors[group_id] = group_color(group_status.state)
        container_ids = [
            child.id for child in graph.children(group_id) if isinstance(child, ContainerNode)
        ]
        for cid, counts in tally_containers(group_status, container_ids).items():
            result.container_fills[cid] = container_fill(counts, group.scale)

    logger.debug(
        f"Reconciled {len(result.group_colors)} group(s), "
        f"{len(result.container_fills)} container(s)"
    )
    return result
