"""Telemetry models parsed from the execution service's status payload."""

from pipedeck.models.telemetry.snapshot import (
    ContainerStatus,
    GroupStatus,
    NodeResources,
    PodStatus,
    TelemetrySnapshot,
)

__all__ = [
    "ContainerStatus",
    "GroupStatus",
    "NodeResources",
    "PodStatus",
    "TelemetrySnapshot",
]
