"""Pipeline screen: the diagram as a tree, resource gauges and run controls."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.screen import Screen
from textual.widgets import Footer, Header, Static, Tree
from textual.worker import Worker, WorkerState

from pipedeck.api.protocols import ExecutionService, PersistenceService, SecretsService
from pipedeck.controllers.pipeline import PipelineController
from pipedeck.keyboard import PIPELINE_SCREEN_BINDINGS
from pipedeck.models.graph import KubernetesGroup
from pipedeck.models.state.app_settings import AppSettings
from pipedeck.models.state.session import PipelineSession
from pipedeck.screens.pipeline.config import (
    EXECUTING_SUBTITLE,
    GAUGE_ROW_ID,
    GAUGES,
    IDLE_SUBTITLE,
    LINKS_LABEL,
    TITLE_ID,
    TREE_ID,
)
from pipedeck.screens.pipeline.presenter import (
    PipelinePresenter,
    PipelineRendered,
    PipelineStatusUpdated,
)
from pipedeck.widgets import ResourceGauge

logger = logging.getLogger(__name__)


class PipelineScreen(Screen[None]):
    """Shows one pipeline and drives it through its controller."""

    BINDINGS = PIPELINE_SCREEN_BINDINGS
    CSS_PATH = "../../css/screens/pipeline_screen.tcss"

    def __init__(
        self,
        persistence: PersistenceService,
        execution: ExecutionService,
        *,
        secrets: SecretsService | None = None,
        settings: AppSettings | None = None,
        session: PipelineSession | None = None,
        title: str | None = None,
    ) -> None:
        super().__init__()
        self._initial_title = title
        self.presenter = PipelinePresenter(self)
        self.controller = PipelineController(
            persistence,
            execution,
            self.presenter,
            secrets=secrets,
            settings=settings,
            session=session,
        )

    # =========================================================================
    # Composition
    # =========================================================================

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static(self.controller.title, id=TITLE_ID)
        with Horizontal(id=GAUGE_ROW_ID):
            for gauge_id, label in GAUGES:
                yield ResourceGauge(label, id=gauge_id)
        tree: Tree[str] = Tree(self.controller.title, id=TREE_ID)
        tree.show_root = True
        yield tree
        yield Footer()

    def on_mount(self) -> None:
        self._rebuild_tree()
        self._update_status()
        title = self._initial_title or self.controller.session.title
        if title:
            self._set_gauges_loading(True)
            self._start(self.controller.load(title), "load")
        else:
            self.controller.arm_autosave()

    async def on_unmount(self) -> None:
        await self.controller.close()

    def _set_gauges_loading(self, loading: bool) -> None:
        for gauge in self.query(ResourceGauge):
            gauge.is_loading = loading

    # =========================================================================
    # Presenter messages
    # =========================================================================

    def on_pipeline_rendered(self, _: PipelineRendered) -> None:
        self._rebuild_tree()

    def on_pipeline_status_updated(self, _: PipelineStatusUpdated) -> None:
        self._rebuild_tree()
        self._update_status()

    def _rebuild_tree(self) -> None:
        try:
            tree = self.query_one(f"#{TREE_ID}", Tree)
            title = self.query_one(f"#{TITLE_ID}", Static)
        except NoMatches:
            return

        graph = self.controller.graph
        title.update(graph.title)
        tree.clear()
        tree.root.set_label(graph.title)
        tree.root.data = None

        for node in graph.nodes:
            if node.parent is not None:
                continue
            branch = tree.root.add(self.presenter.node_label(node), data=node.id, expand=True)
            if isinstance(node, KubernetesGroup):
                for child in graph.children(node.id):
                    branch.add_leaf(self.presenter.node_label(child), data=child.id)
            else:
                branch.allow_expand = False

        if graph.links:
            links = tree.root.add(LINKS_LABEL, expand=True)
            for link in graph.links:
                links.add_leaf(self.presenter.link_label(link), data=link.id)
        tree.root.expand()

    def _update_status(self) -> None:
        readings = self.presenter.readings
        values = (
            readings.required_cpu,
            readings.required_memory,
            readings.available_cpu,
            readings.available_memory,
        )
        try:
            for (gauge_id, _), value in zip(GAUGES, values):
                gauge = self.query_one(f"#{gauge_id}", ResourceGauge)
                gauge.percent = value
                gauge.error = self.presenter.status_error
        except NoMatches:
            return
        self.sub_title = EXECUTING_SUBTITLE if self.presenter.executing else IDLE_SUBTITLE

    def on_tree_node_highlighted(self, event: Tree.NodeHighlighted[Any]) -> None:
        self.controller.session.selected_node = event.node.data

    # =========================================================================
    # Actions
    # =========================================================================

    def _start(self, work: Awaitable[Any], group: str) -> Worker[Any]:
        return self.run_worker(
            work, name=group, group=group, exclusive=True, exit_on_error=False
        )

    def _run(self, factory: Callable[[], Awaitable[Any]], group: str) -> None:
        self._start(factory(), group)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        worker = event.worker
        if event.state not in (WorkerState.SUCCESS, WorkerState.ERROR, WorkerState.CANCELLED):
            return
        if worker.group == "load":
            self._set_gauges_loading(False)
        if event.state == WorkerState.ERROR:
            logger.error(f"Worker '{worker.name}' error: {worker.error}")
            self.notify(f"{worker.name.capitalize()} failed: {worker.error}", severity="error")

    def action_save(self) -> None:
        self._run(self.controller.save, "save")

    def action_execute(self) -> None:
        self._run(self.controller.execute, "run")

    def action_play_pause(self) -> None:
        self._run(self.controller.play_pause, "run")

    def action_destroy(self) -> None:
        self._run(self.controller.destroy, "run")

    def action_refresh(self) -> None:
        self._run(self.controller.refresh, "status")

    def action_unembed(self) -> None:
        selected = self.controller.session.selected_node
        node = self.controller.graph.get_node(selected)
        if node is None or node.parent is None:
            self.notify("Select an embedded node first", severity="warning")
            return
        self.controller.unembed(node.id)

    def action_remove(self) -> None:
        selected = self.controller.session.selected_node
        if selected is None:
            return
        if selected in self.controller.graph:
            self.controller.remove_node(selected)
            return
        try:
            self.controller.remove_link(selected)
        except KeyError:
            logger.debug(f"Nothing to remove for selection {selected!r}")
