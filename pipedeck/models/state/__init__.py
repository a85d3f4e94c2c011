"""Application settings and session state."""

from pipedeck.models.state.app_settings import AppSettings
from pipedeck.models.state.config_manager import ConfigManager
from pipedeck.models.state.session import PipelineSession

__all__ = ["AppSettings", "ConfigManager", "PipelineSession"]
