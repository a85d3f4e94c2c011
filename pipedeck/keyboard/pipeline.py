"""Pipeline screen keyboard bindings."""

from textual.binding import Binding

PIPELINE_SCREEN_BINDINGS: list[Binding] = [
    Binding("s", "save", "Save"),
    Binding("x", "execute", "Execute"),
    Binding("p", "play_pause", "Start/Stop"),
    Binding("D", "destroy", "Destroy"),
    Binding("r", "refresh", "Refresh"),
    Binding("u", "unembed", "Unembed"),
    Binding("delete", "remove", "Remove"),
]

__all__ = [
    "PIPELINE_SCREEN_BINDINGS",
]
