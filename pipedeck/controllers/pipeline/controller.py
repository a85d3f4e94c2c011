"""Pipeline controller: lifecycle, timers and graph edits for one pipeline.

The controller owns the single ``PipelineGraph`` instance and is the only
place that changes it or the executing flag. Service calls go through the
protocols in ``pipedeck.api.protocols``; results are pushed to a ``Renderer``.

Lifecycle::

    IDLE -> LOADING -> READY <-> EXECUTING -> STOPPING -> READY
                       any   -> DESTROYING -> IDLE
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from pipedeck.api.protocols import (
    ExecutionService,
    PersistenceService,
    Renderer,
    SecretsService,
)
from pipedeck.constants.enums import ControllerState, LinkType, PipelineAction, Severity
from pipedeck.controllers.base.base_controller import BaseController, WorkerResult
from pipedeck.controllers.resources.aggregator import GaugeReadings, gauge_readings
from pipedeck.controllers.status.reconciler import ReconcileResult, VisualState, reconcile
from pipedeck.models.errors import MalformedDocument, PipelineError
from pipedeck.models.graph import (
    ContainerNode,
    Endpoint,
    Link,
    Node,
    PipelineGraph,
    Point,
    bucket_name,
    decode_document,
    encode_document,
)
from pipedeck.models.state.app_settings import AppSettings
from pipedeck.models.state.session import PipelineSession
from pipedeck.models.telemetry import TelemetrySnapshot
from pipedeck.utils.periodic_task import PeriodicTask

logger = logging.getLogger(__name__)


class PipelineController(BaseController):
    """Drives one pipeline between the editor, the services and the renderer."""

    def __init__(
        self,
        persistence: PersistenceService,
        execution: ExecutionService,
        renderer: Renderer,
        *,
        secrets: SecretsService | None = None,
        settings: AppSettings | None = None,
        session: PipelineSession | None = None,
    ) -> None:
        super().__init__()
        self._persistence = persistence
        self._execution = execution
        self._secrets = secrets
        self._renderer = renderer
        self.settings = settings or AppSettings()
        self.session = session or PipelineSession()

        self.graph = PipelineGraph(title=self.settings.untitled_title)
        self.visual = VisualState()
        self.snapshot: TelemetrySnapshot | None = None
        self.readings = GaugeReadings()
        self.state = ControllerState.IDLE
        self.executing = False

        self._poller = PeriodicTask(
            self._refresh_status, self.settings.poll_interval, name="status-poll"
        )
        self._autosave = PeriodicTask(
            self._write, self.settings.autosave_interval, name="autosave"
        )
        self._write_lock = asyncio.Lock()

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def title(self) -> str:
        return self.graph.title

    @property
    def is_untitled(self) -> bool:
        return self.graph.title == self.settings.untitled_title

    @property
    def polling(self) -> bool:
        return self._poller.armed

    @property
    def autosaving(self) -> bool:
        return self._autosave.armed

    def _set_state(self, state: ControllerState) -> None:
        if state is not self.state:
            logger.info(f"Pipeline '{self.title}': {self.state.value} -> {state.value}")
            self.state = state

    def _set_executing(self, executing: bool) -> None:
        if executing != self.executing:
            self.executing = executing
            self._renderer.set_executing(executing)

    def _notify(self, message: str, severity: Severity = Severity.INFO) -> None:
        self._renderer.notify(message, severity)

    def _ensure_polling(self) -> None:
        if not self._closed:
            self._poller.start()

    def arm_autosave(self) -> None:
        """Start the auto-save timer if it is not running."""
        if not self._closed:
            self._autosave.start()

    def _repaint(self) -> None:
        for group_id, color in self.visual.group_colors.items():
            self._renderer.paint_group(group_id, color)
        for container_id, fill in self.visual.container_fills.items():
            self._renderer.paint_container(container_id, fill)
        self._renderer.update_gauges(self.readings)

    def _rendered(self) -> None:
        self.visual.prune(self.graph)
        self._renderer.render_graph(self.graph)
        self._repaint()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def load(self, title: str | None = None) -> WorkerResult:
        """Load a stored pipeline, show it and start following its status.

        Without ``title`` the pipeline remembered in the session is loaded.
        A network failure forgets the remembered pipeline.
        """
        title = title or self.session.title
        if not title:
            return WorkerResult(success=False, error="No pipeline to load")

        self._set_state(ControllerState.LOADING)
        result = await self._call(
            f"Load '{title}'", self._persistence.get(self.settings.pipeline_bucket, title)
        )
        if self._closed:
            return result
        if not result.success:
            self.session.forget()
            self._set_state(ControllerState.IDLE)
            self._notify(f"Cannot load pipeline '{title}': {result.error}", Severity.WARNING)
            return result

        try:
            graph = decode_document(result.data)
        except MalformedDocument as exc:
            self._set_state(ControllerState.IDLE)
            self._notify(f"Pipeline '{title}' is unreadable: {exc}", Severity.ERROR)
            return WorkerResult(success=False, error=str(exc), duration_ms=result.duration_ms)

        graph.title = title
        self.graph = graph
        self.visual.reset()
        self.snapshot = None
        self.readings = GaugeReadings()
        self.session.remember(title)
        for problem in graph.load_problems:
            self._notify(str(problem), Severity.WARNING)
        self._rendered()
        self._set_executing(False)
        self._set_state(ControllerState.READY)

        await self.status()
        self.arm_autosave()
        return WorkerResult(success=True, data=graph, duration_ms=result.duration_ms)

    def new_pipeline(self, title: str | None = None) -> PipelineGraph:
        """Replace the graph with an empty one."""
        self.graph = PipelineGraph(title=title or self.settings.untitled_title)
        self.visual.reset()
        self.snapshot = None
        self.readings = GaugeReadings()
        self._set_executing(False)
        self._set_state(ControllerState.READY)
        self._rendered()
        return self.graph

    def rename(self, title: str) -> None:
        title = title.strip()
        if not title:
            raise ValueError("Pipeline title cannot be empty")
        self.graph.title = title
        self._renderer.render_graph(self.graph)

    async def _write(self) -> bool:
        async with self._write_lock:
            return await self._write_unlocked()

    async def _write_unlocked(self) -> bool:
        if self.is_untitled or self.graph.is_empty:
            logger.debug(f"Not saving '{self.title}': untitled or empty")
            return False

        title = self.title
        result = await self._call(
            f"Save '{title}'",
            self._persistence.put(
                self.settings.pipeline_bucket, None, title, encode_document(self.graph)
            ),
        )
        if self._closed:
            return False
        if not result.success:
            self._notify(f"Cannot save pipeline '{title}': {result.error}", Severity.WARNING)
            return False

        store = await self._call(
            f"Create file store for '{title}'",
            self._persistence.create_bucket(self.settings.files_bucket, bucket_name(title)),
        )
        if self._closed:
            return True
        if not store.success:
            self._notify(f"Cannot create file store: {store.error}", Severity.WARNING)
        self.session.remember(title)
        self._notify("Pipeline saved", Severity.INFO)
        return True

    async def save(self) -> bool:
        """Persist the pipeline.

        Refuses, without touching persistence, while the pipeline is untitled
        or empty. The auto-save timer restarts from now either way; an
        auto-save already writing is allowed to finish first.

        Returns:
            True when the pipeline was written.
        """
        if not self._closed:
            self._autosave.restart()
        return await self._write()

    async def _dispatch(
        self,
        action: PipelineAction,
        transitional: ControllerState,
        settled: ControllerState,
        executing: bool,
    ) -> WorkerResult:
        if self.is_untitled:
            self._notify("Save the pipeline before running it", Severity.WARNING)
            return WorkerResult(success=False, error="Pipeline is untitled")

        previous = self.state
        self._set_state(transitional)
        result = await self._call(
            f"{action.value} '{self.title}'", self._execution.dispatch(action, self.title)
        )
        if self._closed:
            return result
        if not result.success:
            self._set_state(previous)
            self._notify(f"{action.value} failed: {result.error}", Severity.WARNING)
            return result

        self._set_state(settled)
        self._set_executing(executing)
        self._ensure_polling()
        return result

    async def execute(self) -> WorkerResult:
        """Deploy and run the pipeline, then refresh status immediately."""
        result = await self._dispatch(
            PipelineAction.EXECUTE,
            ControllerState.EXECUTING,
            ControllerState.EXECUTING,
            executing=True,
        )
        if result.success and not self._closed:
            await self._refresh_status()
        return result

    async def start(self) -> WorkerResult:
        return await self._dispatch(
            PipelineAction.START,
            ControllerState.EXECUTING,
            ControllerState.EXECUTING,
            executing=True,
        )

    async def stop(self) -> WorkerResult:
        return await self._dispatch(
            PipelineAction.STOP,
            ControllerState.STOPPING,
            ControllerState.READY,
            executing=False,
        )

    async def destroy(self) -> WorkerResult:
        """Tear the deployment down. The controller returns to IDLE."""
        return await self._dispatch(
            PipelineAction.DESTROY,
            ControllerState.DESTROYING,
            ControllerState.IDLE,
            executing=False,
        )

    async def play_pause(self) -> WorkerResult:
        if self.executing:
            return await self.stop()
        return await self.start()

    async def _refresh_status(self) -> WorkerResult:
        if self.is_untitled:
            return WorkerResult(success=False, error="No pipeline loaded")

        result = await self._call(
            f"Status of '{self.title}'", self._execution.status(self.title)
        )
        if self._closed:
            return result
        if not result.success:
            self._renderer.show_status_error(result.error or "unavailable")
            self._notify(f"Status unavailable: {result.error}", Severity.WARNING)
            return result

        try:
            snapshot = TelemetrySnapshot.from_payload(result.data)
        except ValidationError as exc:
            logger.warning(f"Unreadable status for '{self.title}': {exc}")
            self._renderer.show_status_error("unreadable response")
            self._notify("Status unavailable: unreadable response", Severity.WARNING)
            return WorkerResult(success=False, error=str(exc), duration_ms=result.duration_ms)

        reconciled: ReconcileResult = reconcile(self.graph, snapshot)
        self.snapshot = snapshot
        self.visual.merge(reconciled)
        self.visual.prune(self.graph)
        self.readings = gauge_readings(self.graph, snapshot)
        self._renderer.show_status_error(None)
        self._repaint()
        return WorkerResult(success=True, data=reconciled, duration_ms=result.duration_ms)

    async def status(self) -> WorkerResult:
        """Poll telemetry once and make sure periodic polling is running."""
        self._ensure_polling()
        return await self._refresh_status()

    async def refresh(self) -> WorkerResult:
        return await self.status()

    async def close(self) -> None:
        self._mark_closed()
        self._poller.cancel()
        self._autosave.cancel()
        logger.info(f"Closed controller for '{self.title}'")

    # =========================================================================
    # Credentials
    # =========================================================================

    async def set_credential(self, node_id: str, plaintext: str) -> WorkerResult:
        """Encrypt and store a container's git password.

        The stored value is already the encrypted form, so an unchanged value
        is kept as is.
        """
        node = self.graph.node(node_id)
        if not isinstance(node, ContainerNode):
            raise ValueError(f"Node {node_id} is not a container")
        if plaintext == node.gitrepo.password:
            return WorkerResult(success=True, data=node.gitrepo.password)
        if self._secrets is None:
            raise PipelineError("No secrets service configured")

        result = await self._call("Encrypt credential", self._secrets.encrypt(plaintext))
        if self._closed:
            return result
        if not result.success:
            self._notify(f"Cannot encrypt credential: {result.error}", Severity.WARNING)
            return result

        gitrepo = node.gitrepo.model_copy(update={"password": result.data})
        self.graph.update_node(node_id, gitrepo=gitrepo.model_dump())
        self._rendered()
        await self.save()
        return result

    # =========================================================================
    # Graph edits
    # =========================================================================

    def add_node(self, node: Node | Mapping[str, Any]) -> str:
        node_id = self.graph.add_node(node)
        self._rendered()
        return node_id

    def drop_node(self, node_id: str, point: Point) -> str | None:
        """Place a node at ``point``, embedding it in the group found there."""
        parent_id = self.graph.drop_node(node_id, point, hit_test=self._renderer.hit_test)
        self._rendered()
        return parent_id

    def embed(self, parent_id: str, child_id: str) -> None:
        self.graph.embed(parent_id, child_id)
        self._rendered()

    def unembed(self, child_id: str) -> None:
        self.graph.unembed(child_id)
        self._rendered()

    def add_link(
        self,
        source: Endpoint | Mapping[str, Any] | str,
        target: Endpoint | Mapping[str, Any] | Point | str | None,
        link_type: LinkType | str = LinkType.FILE,
        attrs: Mapping[str, Any] | None = None,
    ) -> str:
        link_id = self.graph.add_link(source, target, link_type, attrs)
        if not self.graph.link(link_id).attached:
            self.session.active_link = link_id
        self._rendered()
        return link_id

    def connect_link(self, target: Endpoint | Mapping[str, Any] | str) -> Link | None:
        """Attach the link being dragged to ``target`` and end the drag."""
        link_id = self.session.active_link
        if link_id is None:
            return None
        try:
            link = self.graph.connect_link(link_id, target)
        finally:
            self.session.clear_drag()
        self._rendered()
        return link

    def remove_node(self, node_id: str) -> None:
        self.graph.remove_node(node_id)
        if self.session.selected_node == node_id:
            self.session.selected_node = None
        self._rendered()

    def remove_link(self, link_id: str) -> None:
        self.graph.remove_link(link_id)
        if self.session.active_link == link_id:
            self.session.clear_drag()
        self._rendered()

    async def update_node(self, node_id: str, **changes: Any) -> Node:
        """Apply property edits to a node and save."""
        node = self.graph.update_node(node_id, **changes)
        self._rendered()
        await self.save()
        return node

    async def update_link(self, link_id: str, **changes: Any) -> Link:
        """Apply property edits to a link and save."""
        link = self.graph.update_link(link_id, **changes)
        self._rendered()
        await self.save()
        return link
