"""All enum definitions for pipedeck.

This module consolidates all enumerations used throughout the application.
"""

from enum import Enum

# =============================================================================
# Graph Enums
# =============================================================================


class NodeKind(str, Enum):
    """Node variants that can be placed on a pipeline."""

    SOURCE = "source"
    CONTAINER = "container"
    KUBERNETES = "kubernetes"


class LinkType(str, Enum):
    """Transport carried by a link between two nodes."""

    FILE = "file"
    TCP = "tcp"
    UDP = "udp"
    SOCKET = "socket"


# =============================================================================
# Telemetry Enums
# =============================================================================


class GroupState(str, Enum):
    """Deployment group states reported by the execution service."""

    READY = "Ready"
    RUNNING = "Running"
    BUSY = "Busy"
    EXECUTING = "Executing"
    FAILED = "Failed"
    TERMINATED = "Terminated"
    TERMINATING = "Terminating"
    CREATING = "Creating"
    PENDING = "Pending"


class ContainerState(str, Enum):
    """Per-container states reported inside a pod."""

    WAITING = "Waiting"
    RUNNING = "Running"
    TERMINATED = "Terminated"
    READY = "Ready"
    BUSY = "Busy"


# =============================================================================
# Controller Enums
# =============================================================================


class ControllerState(Enum):
    """Pipeline controller lifecycle states."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EXECUTING = "executing"
    STOPPING = "stopping"
    DESTROYING = "destroying"


class PipelineAction(str, Enum):
    """Dispatchable actions on the execution service."""

    EXECUTE = "execute"
    START = "startflow"
    STOP = "stopflow"
    DESTROY = "destroyflow"


class Severity(Enum):
    """Severity levels for user-visible notifications."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "information"


__all__ = [
    "ContainerState",
    "ControllerState",
    "GroupState",
    "LinkType",
    "NodeKind",
    "PipelineAction",
    "Severity",
]
