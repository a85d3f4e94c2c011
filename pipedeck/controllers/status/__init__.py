"""Status reconciliation between telemetry and the diagram."""

from pipedeck.controllers.status.reconciler import (
    GROUP_STATE_COLORS,
    ContainerCounts,
    ContainerFill,
    ReconcileResult,
    VisualState,
    container_fill,
    group_color,
    reconcile,
    tally_containers,
)

__all__ = [
    "GROUP_STATE_COLORS",
    "ContainerCounts",
    "ContainerFill",
    "ReconcileResult",
    "VisualState",
    "container_fill",
    "group_color",
    "reconcile",
    "tally_containers",
]
