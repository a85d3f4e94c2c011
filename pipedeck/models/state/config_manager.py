"""YAML-backed settings persistence."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from pipedeck.models.errors import ConfigLoadError, ConfigSaveError
from pipedeck.models.state.app_settings import AppSettings

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "PIPEDECK_CONFIG"
SERVER_URL_ENV = "PIPEDECK_SERVER_URL"
DEFAULT_CONFIG_PATH = Path("~/.config/pipedeck/settings.yaml")


class ConfigManager:
    """Loads and saves ``AppSettings`` as YAML.

    The file location comes from ``PIPEDECK_CONFIG`` when set, and
    ``PIPEDECK_SERVER_URL`` overrides the stored server URL on load.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        if path is None:
            path = self._environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
        self.path = Path(path).expanduser()

    def read(self) -> AppSettings:
        """Read settings from disk; a missing file yields defaults.

        Raises:
            ConfigLoadError: If the file cannot be read, parsed or validated.
        """
        if not self.path.exists():
            return AppSettings()
        try:
            with open(self.path, encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigLoadError(f"Cannot read settings from {self.path}: {exc}") from exc

        if data is None:
            return AppSettings()
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Settings file {self.path} must contain a mapping")
        try:
            return AppSettings.model_validate(data)
        except ValidationError as exc:
            raise ConfigLoadError(f"Invalid settings in {self.path}: {exc}") from exc

    def load(self) -> AppSettings:
        """Read settings, falling back to defaults, then apply env overrides."""
        try:
            settings = self.read()
        except ConfigLoadError as exc:
            logger.warning(f"{exc}; using defaults")
            settings = AppSettings()

        server_url = self._environ.get(SERVER_URL_ENV)
        if server_url:
            settings = settings.model_copy(update={"server_url": server_url})
        return settings

    def save(self, settings: AppSettings) -> None:
        """Write settings to disk.

        Raises:
            ConfigSaveError: If the file cannot be written.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as handle:
                yaml.safe_dump(settings.model_dump(), handle, sort_keys=False)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigSaveError(f"Cannot write settings to {self.path}: {exc}") from exc
        logger.debug(f"Saved settings to {self.path}")
