"""Constants module for pipedeck.

Centralized constants organized by domain:
- enums.py: All Enum class definitions
- values.py: Scalar constants (strings, colors, bounds with Final)
- timeouts.py: Timeout and timer values (seconds)
- limits.py: Validation ranges
- defaults.py: Default values for settings and nodes
"""

from pipedeck.constants.defaults import (
    CONTAINER_CPU_DEFAULT,
    CONTAINER_MEMORY_DEFAULT,
    LOG_LEVEL_DEFAULT,
    SERVER_URL_DEFAULT,
)
from pipedeck.constants.enums import (
    ContainerState,
    ControllerState,
    GroupState,
    LinkType,
    NodeKind,
    PipelineAction,
    Severity,
)
from pipedeck.constants.limits import (
    AUTOSAVE_INTERVAL_MIN,
    POLL_INTERVAL_MIN,
)
from pipedeck.constants.timeouts import (
    AUTOSAVE_INTERVAL,
    SERVICE_REQUEST_TIMEOUT,
    STATUS_POLL_INTERVAL,
)
from pipedeck.constants.values import (
    APP_TITLE,
    FILES_BUCKET,
    GAUGE_CEILING,
    GAUGE_FLOOR,
    PIPELINE_BUCKET,
    UNTITLED_PIPELINE,
)

__all__ = [
    # Application
    "APP_TITLE",
    # Timers
    "AUTOSAVE_INTERVAL",
    "AUTOSAVE_INTERVAL_MIN",
    # Defaults
    "CONTAINER_CPU_DEFAULT",
    "CONTAINER_MEMORY_DEFAULT",
    "FILES_BUCKET",
    # Gauges
    "GAUGE_CEILING",
    "GAUGE_FLOOR",
    "LOG_LEVEL_DEFAULT",
    # Persistence
    "PIPELINE_BUCKET",
    "POLL_INTERVAL_MIN",
    "SERVER_URL_DEFAULT",
    "SERVICE_REQUEST_TIMEOUT",
    "STATUS_POLL_INTERVAL",
    "UNTITLED_PIPELINE",
    # Enums
    "ContainerState",
    "ControllerState",
    "GroupState",
    "LinkType",
    "NodeKind",
    "PipelineAction",
    "Severity",
]
