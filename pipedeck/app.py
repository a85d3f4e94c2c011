"""Main application class for the pipedeck TUI."""

from __future__ import annotations

import logging

import httpx
from textual.app import App
from textual.binding import Binding

from pipedeck.api import (
    ApiClient,
    HttpExecutionService,
    HttpPersistenceService,
    HttpSecretsService,
)
from pipedeck.constants import APP_TITLE
from pipedeck.keyboard.app import APP_BINDINGS
from pipedeck.models.errors import ConfigSaveError
from pipedeck.models.state.app_settings import AppSettings
from pipedeck.models.state.config_manager import ConfigManager
from pipedeck.models.state.session import PipelineSession
from pipedeck.screens import PipelineScreen

logger = logging.getLogger(__name__)


class PipedeckApp(App[None]):
    """Main TUI application for pipedeck."""

    TITLE = APP_TITLE
    CSS_PATH = "css/app.tcss"
    BINDINGS: list[Binding] = APP_BINDINGS

    settings: AppSettings

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        config: ConfigManager | None = None,
        pipeline: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config or ConfigManager()
        self.settings = settings or self.config.load()
        self.session = PipelineSession(title=pipeline or self.settings.last_pipeline)
        self.client = ApiClient(
            self.settings.server_url,
            timeout=self.settings.request_timeout,
            transport=transport,
        )

    def on_mount(self) -> None:
        self.push_screen(
            PipelineScreen(
                HttpPersistenceService(self.client),
                HttpExecutionService(self.client),
                secrets=HttpSecretsService(self.client),
                settings=self.settings,
                session=self.session,
            )
        )

    def action_show_help(self) -> None:
        """Show help dialog."""
        self.notify(
            "Keybindings:\n"
            "  s: Save\n"
            "  x: Execute\n"
            "  p: Start / Stop\n"
            "  D: Destroy\n"
            "  r: Refresh status\n"
            "  u: Unembed selected node\n"
            "  Delete: Remove selection\n"
            "  ?: Help\n"
            "  q: Quit",
            severity="information",
            title="Help",
        )

    async def on_unmount(self) -> None:
        """Close the HTTP client and remember the open pipeline."""
        await self.client.aclose()
        self.settings = self.settings.model_copy(
            update={"last_pipeline": self.session.title}
        )
        try:
            self.config.save(self.settings)
        except ConfigSaveError as exc:
            logger.warning(f"Failed to save settings: {exc}")


__all__ = [
    "PipedeckApp",
]
