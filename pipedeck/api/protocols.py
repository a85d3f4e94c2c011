"""Contracts between the pipeline controller and the outside world.

The controller depends only on these protocols; ``pipedeck.api.http_client``
implements the service ones over HTTP and the Textual presenter implements
``Renderer``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pipedeck.constants.enums import PipelineAction, Severity

if TYPE_CHECKING:
    from pipedeck.controllers.resources.aggregator import GaugeReadings
    from pipedeck.controllers.status.reconciler import ContainerFill
    from pipedeck.models.graph import PipelineGraph, Point


@runtime_checkable
class PersistenceService(Protocol):
    """Key/value store organised in (nested) buckets."""

    async def get(self, bucket: str, key: str) -> str: ...

    async def put(self, bucket: str, child: str | None, key: str, value: str) -> None: ...

    async def delete(self, bucket: str, key: str) -> None: ...

    async def create_bucket(self, bucket: str, child: str | None = None) -> None: ...


@runtime_checkable
class ExecutionService(Protocol):
    """Runs pipelines on the cluster and reports their status."""

    async def dispatch(self, action: PipelineAction, pipeline: str) -> Any: ...

    async def status(self, pipeline: str) -> dict[str, Any]: ...


@runtime_checkable
class SecretsService(Protocol):
    async def encrypt(self, value: str) -> str: ...


@runtime_checkable
class Renderer(Protocol):
    """Whatever draws the pipeline. All methods are synchronous."""

    def render_graph(self, graph: PipelineGraph) -> None: ...

    def paint_group(self, group_id: str, color: str) -> None: ...

    def paint_container(self, container_id: str, fill: ContainerFill) -> None: ...

    def update_gauges(self, readings: GaugeReadings) -> None: ...

    def show_status_error(self, error: str | None) -> None: ...

    def hit_test(self, point: Point) -> list[str]: ...

    def notify(self, message: str, severity: Severity) -> None: ...

    def set_executing(self, executing: bool) -> None: ...
