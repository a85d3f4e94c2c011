"""Per-user editing session state."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PipelineSession:
    """What the user is working on right now.

    ``title`` is the remembered pipeline name, restored on the next load.
    ``active_link`` is a link whose target end is being dragged.
    """

    title: str = ""
    active_link: str | None = None
    selected_node: str | None = None

    def remember(self, title: str) -> None:
        self.title = title

    def forget(self) -> None:
        self.title = ""

    def clear_drag(self) -> None:
        self.active_link = None
