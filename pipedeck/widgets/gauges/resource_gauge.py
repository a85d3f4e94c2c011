"""ResourceGauge widget: one labelled percentage bar.

CSS Classes: widget-resource-gauge, plus ok / warning / error by level and
loading / failed while the reading is pending or unavailable
"""

from __future__ import annotations

from textual.app import ComposeResult
from textual.reactive import reactive
from textual.widgets import ProgressBar, Static

from pipedeck.constants.values import GAUGE_FLOOR
from pipedeck.widgets._base import StatefulWidget

# Percent thresholds for the warning and error classes.
_WARNING_LEVEL = 75.0
_ERROR_LEVEL = 90.0


def gauge_level(percent: float) -> str:
    if percent >= _ERROR_LEVEL:
        return "error"
    if percent >= _WARNING_LEVEL:
        return "warning"
    return "ok"


class ResourceGauge(StatefulWidget):
    """Percentage gauge for a CPU or memory reading."""

    DEFAULT_CSS = """
    ResourceGauge {
        height: auto;
        width: 1fr;
        padding: 0 1;
        border: solid $surface-lighten-1;
        background: $surface;
    }
    ResourceGauge > .gauge-title {
        text-style: bold;
        color: $secondary;
        width: 100%;
    }
    ResourceGauge > .gauge-value {
        text-style: bold;
        width: 100%;
    }
    ResourceGauge.ok > .gauge-value { color: $success; }
    ResourceGauge.warning > .gauge-value { color: $warning; }
    ResourceGauge.error > .gauge-value { color: $error; }
    ResourceGauge.loading > .gauge-value, ResourceGauge.failed > .gauge-value { color: $text-muted; }
    """
    _id_pattern = "resource-gauge-{uuid}"
    _default_classes = "widget-resource-gauge"

    percent = reactive(GAUGE_FLOOR, init=False)

    def __init__(self, title: str, *, id: str | None = None, classes: str = "") -> None:
        super().__init__(id=id, classes=classes)
        self._title = title

    def compose(self) -> ComposeResult:
        yield Static(self._title, classes="gauge-title")
        yield ProgressBar(total=100, show_eta=False, show_percentage=False, classes="gauge-bar")
        yield Static(self._format(self.percent), classes="gauge-value")

    def on_mount(self) -> None:
        self._apply(self.percent)

    @staticmethod
    def _format(percent: float) -> str:
        return f"{percent:.1f}%"

    def _value_text(self) -> str:
        if self.is_loading:
            return "loading"
        if self.error:
            return "n/a"
        return self._format(self.percent)

    def watch_percent(self, percent: float) -> None:
        self._apply(percent)

    def watch_is_loading(self, loading: bool) -> None:
        self.set_class(loading, "loading")
        self._show_value()

    def watch_error(self, error: str | None) -> None:
        self.set_class(bool(error), "failed")
        self.tooltip = error
        self._show_value()

    def _show_value(self) -> None:
        if self.is_mounted:
            self.query_one(".gauge-value", Static).update(self._value_text())

    def _apply(self, percent: float) -> None:
        if not self.is_mounted:
            return
        self.query_one(ProgressBar).update(progress=percent)
        self._show_value()
        self.remove_class("ok", "warning", "error")
        self.add_class(gauge_level(percent))
