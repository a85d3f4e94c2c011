"""Pipeline screen presenter - renderer contract, view state and formatting."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.message import Message

from pipedeck.constants.enums import Severity
from pipedeck.controllers.resources.aggregator import GaugeReadings
from pipedeck.controllers.status.reconciler import ContainerFill
from pipedeck.models.graph import (
    ContainerNode,
    KubernetesGroup,
    Link,
    Node,
    PipelineGraph,
    Point,
)
from pipedeck.screens.pipeline.config import FILL_BAR_WIDTH, KIND_GLYPHS
from pipedeck.utils.resource_parser import format_bytes, parse_memory

# =============================================================================
# Messages
# =============================================================================


class PipelineRendered(Message):
    """The graph structure changed and the tree must be rebuilt."""


class PipelineStatusUpdated(Message):
    """Colors, fills, gauges or the executing flag changed."""


class PipelinePresenter:
    """Renderer for PipelineScreen.

    Keeps the last painted state and tells the screen to redraw through
    messages, so controller callbacks never touch widgets directly.
    """

    def __init__(self, screen: Any) -> None:
        self._screen = screen
        self.graph: PipelineGraph | None = None
        self.group_colors: dict[str, str] = {}
        self.container_fills: dict[str, ContainerFill] = {}
        self.readings = GaugeReadings()
        self.executing = False
        self.status_error: str | None = None

    # =========================================================================
    # Renderer
    # =========================================================================

    def render_graph(self, graph: PipelineGraph) -> None:
        self.graph = graph
        self.group_colors = {k: v for k, v in self.group_colors.items() if k in graph}
        self.container_fills = {k: v for k, v in self.container_fills.items() if k in graph}
        self._screen.post_message(PipelineRendered())

    def paint_group(self, group_id: str, color: str) -> None:
        self.group_colors[group_id] = color

    def paint_container(self, container_id: str, fill: ContainerFill) -> None:
        self.container_fills[container_id] = fill

    def update_gauges(self, readings: GaugeReadings) -> None:
        self.readings = readings
        self._screen.post_message(PipelineStatusUpdated())

    def show_status_error(self, error: str | None) -> None:
        if error != self.status_error:
            self.status_error = error
            self._screen.post_message(PipelineStatusUpdated())

    def hit_test(self, point: Point) -> list[str]:
        """Ids of the nodes whose stored box contains the point."""
        if self.graph is None:
            return []
        return [node.id for node in self.graph.nodes if node.contains(point)]

    def notify(self, message: str, severity: Severity) -> None:
        self._screen.notify(message, severity=severity.value)

    def set_executing(self, executing: bool) -> None:
        self.executing = executing
        self._screen.post_message(PipelineStatusUpdated())

    # =========================================================================
    # Formatting
    # =========================================================================

    @staticmethod
    def fill_bar(fill: ContainerFill | None) -> Text:
        """Text bar such as ``█████░░░░░ 50%`` in the fill color."""
        if fill is None:
            return Text("░" * FILL_BAR_WIDTH, style="dim")
        filled = max(0, min(FILL_BAR_WIDTH, round(fill.width / 100 * FILL_BAR_WIDTH)))
        bar = Text("█" * filled, style=fill.color)
        bar.append("░" * (FILL_BAR_WIDTH - filled), style="dim")
        bar.append(f" {fill.width}%")
        return bar

    def node_label(self, node: Node) -> Text:
        glyph = KIND_GLYPHS.get(node.kind, "?")
        name = node.name or node.id[:8]
        if isinstance(node, KubernetesGroup):
            color = self.group_colors.get(node.id)
            label = Text(f"{glyph} ", style=color or "")
            label.append(name, style=f"bold {color}" if color else "bold")
            label.append(f"  x{node.scale}", style="dim")
            return label
        label = Text(f"{glyph} {name}")
        if isinstance(node, ContainerNode):
            label.append(f"  {node.cpu} / {format_bytes(parse_memory(node.memory))}  ", style="dim")
            label.append_text(self.fill_bar(self.container_fills.get(node.id)))
        else:
            label.append(f"  {node.sourcetype}", style="dim")
        return label

    def link_label(self, link: Link) -> Text:
        names = []
        for endpoint in (link.source, link.target):
            node = self.graph.get_node(endpoint.id) if self.graph else None
            names.append(node.name if node is not None and node.name else (endpoint.id or "?")[:8])
        label = Text(f"{names[0]} → {names[1]}")
        label.append(f"  {link.type}", style="dim")
        return label
