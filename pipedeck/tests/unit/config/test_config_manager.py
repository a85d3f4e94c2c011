"""Tests for AppSettings and the YAML-backed ConfigManager."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from pipedeck.models.errors import ConfigLoadError, ConfigSaveError
from pipedeck.models.state import AppSettings, ConfigManager, PipelineSession


class TestAppSettings:
    """Tests for AppSettings validation."""

    def test_defaults(self) -> None:
        """Defaults match the service layout."""
        settings = AppSettings()
        assert settings.server_url == "http://localhost:8180"
        assert settings.poll_interval == 5
        assert settings.autosave_interval == 60
        assert (settings.pipeline_bucket, settings.files_bucket) == ("pipeline", "files")
        assert settings.untitled_title == "Untitled"

    @pytest.mark.parametrize(
        "field, value",
        [("poll_interval", 0), ("autosave_interval", 1), ("request_timeout", 0)],
    )
    def test_interval_bounds(self, field: str, value: float) -> None:
        """Timers and timeouts cannot be too short."""
        with pytest.raises(ValidationError):
            AppSettings(**{field: value})


class TestConfigManager:
    """Tests for ConfigManager load and save."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """No settings file means default settings."""
        manager = ConfigManager(tmp_path / "absent.yaml", environ={})
        assert manager.load() == AppSettings()

    def test_save_then_load(self, tmp_path: Path) -> None:
        """Saved settings are read back, creating parent directories."""
        path = tmp_path / "nested" / "settings.yaml"
        manager = ConfigManager(path, environ={})
        settings = AppSettings(server_url="http://deck:9000", last_pipeline="Word Count")
        manager.save(settings)
        assert path.exists()
        assert manager.load() == settings

    def test_invalid_yaml_falls_back(self, tmp_path: Path) -> None:
        """Unreadable files raise on read and fall back on load."""
        path = tmp_path / "settings.yaml"
        path.write_text("server_url: [unclosed", encoding="utf-8")
        manager = ConfigManager(path, environ={})
        with pytest.raises(ConfigLoadError):
            manager.read()
        assert manager.load() == AppSettings()

    def test_invalid_values_raise_on_read(self, tmp_path: Path) -> None:
        """Values failing validation are a load error."""
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({"poll_interval": -1}), encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ConfigManager(path, environ={}).read()

    def test_non_mapping_file(self, tmp_path: Path) -> None:
        """A YAML list is not a settings file."""
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError):
            ConfigManager(path, environ={}).read()

    def test_environment_overrides(self, tmp_path: Path) -> None:
        """PIPEDECK_CONFIG picks the file and PIPEDECK_SERVER_URL the server."""
        path = tmp_path / "env.yaml"
        environ = {"PIPEDECK_CONFIG": str(path), "PIPEDECK_SERVER_URL": "http://env:1"}
        manager = ConfigManager(environ=environ)
        assert manager.path == path
        assert manager.load().server_url == "http://env:1"

    def test_save_error(self, tmp_path: Path) -> None:
        """Writing over a directory raises ConfigSaveError."""
        path = tmp_path / "settings.yaml"
        path.mkdir()
        with pytest.raises(ConfigSaveError):
            ConfigManager(path, environ={}).save(AppSettings())


class TestPipelineSession:
    """Tests for PipelineSession."""

    def test_remember_and_forget(self) -> None:
        """The remembered pipeline can be cleared."""
        session = PipelineSession()
        session.remember("Word Count")
        assert session.title == "Word Count"
        session.forget()
        assert session.title == ""

    def test_clear_drag(self) -> None:
        """clear_drag resets the dragged link."""
        session = PipelineSession(active_link="l1")
        session.clear_drag()
        assert session.active_link is None
