"""Default values for settings and newly created nodes.

All default values used in AppSettings and in the node models.
"""

from typing import Final

# ============================================================================
# Settings defaults
# ============================================================================

SERVER_URL_DEFAULT: Final = "http://localhost:8180"
LOG_LEVEL_DEFAULT: Final = "INFO"

# ============================================================================
# Container defaults
# ============================================================================

CONTAINER_CPU_DEFAULT: Final = "500m"
CONTAINER_MEMORY_DEFAULT: Final = "256Mi"
CONTAINER_TIMEOUT_DEFAULT: Final = 15
CONTAINER_EXPOSE_PORT_DEFAULT: Final = -1

# ============================================================================
# Geometry defaults (diagram units)
# ============================================================================

NODE_POSITION_DEFAULT: Final = (50.0, 50.0)
NODE_SIZE_DEFAULT: Final = (50.0, 50.0)
GROUP_SIZE_DEFAULT: Final = (250.0, 250.0)

# ============================================================================
# Link defaults
# ============================================================================

TCP_DEST_PORT_DEFAULT: Final = 443
UDP_DEST_PORT_DEFAULT: Final = 0

__all__ = [
    "CONTAINER_CPU_DEFAULT",
    "CONTAINER_EXPOSE_PORT_DEFAULT",
    "CONTAINER_MEMORY_DEFAULT",
    "CONTAINER_TIMEOUT_DEFAULT",
    "GROUP_SIZE_DEFAULT",
    "LOG_LEVEL_DEFAULT",
    "NODE_POSITION_DEFAULT",
    "NODE_SIZE_DEFAULT",
    "SERVER_URL_DEFAULT",
    "TCP_DEST_PORT_DEFAULT",
    "UDP_DEST_PORT_DEFAULT",
]
