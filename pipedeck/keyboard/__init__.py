"""Keyboard bindings module.

- app: App-level bindings (APP_BINDINGS)
- pipeline: Pipeline screen bindings (PIPELINE_SCREEN_BINDINGS)
"""

from pipedeck.keyboard.app import APP_BINDINGS
from pipedeck.keyboard.pipeline import PIPELINE_SCREEN_BINDINGS

__all__ = [
    "APP_BINDINGS",
    "PIPELINE_SCREEN_BINDINGS",
]
