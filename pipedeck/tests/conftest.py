"""Shared fixtures: in-memory service fakes and a recording renderer."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from pipedeck.constants.enums import PipelineAction, Severity
from pipedeck.controllers.pipeline import PipelineController
from pipedeck.models.errors import NetworkFailure
from pipedeck.models.graph import (
    ContainerNode,
    KubernetesGroup,
    PipelineGraph,
    Point,
    SourceNode,
)
from pipedeck.models.state.app_settings import AppSettings
from pipedeck.models.state.session import PipelineSession


class FakePersistence:
    """Bucket store kept in a dict; ``fail`` makes every call raise."""

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, str]] = {}
        self.created: list[tuple[str, str | None]] = []
        self.puts: list[tuple[str, str | None, str, str]] = []
        self.fail = False
        self.gate: asyncio.Event | None = None
        self.put_gate: asyncio.Event | None = None
        self.puts_waiting = 0

    def _check(self, endpoint: str) -> None:
        if self.fail:
            raise NetworkFailure(f"{endpoint} unreachable", endpoint=endpoint)

    async def get(self, bucket: str, key: str) -> str:
        if self.gate is not None:
            await self.gate.wait()
        self._check("bucket")
        try:
            return self.buckets[bucket][key]
        except KeyError:
            raise NetworkFailure(f"{bucket}/{key} not found", endpoint="bucket", status_code=404) from None

    async def put(self, bucket: str, child: str | None, key: str, value: str) -> None:
        if self.put_gate is not None:
            self.puts_waiting += 1
            await self.put_gate.wait()
        self._check("bucket")
        self.puts.append((bucket, child, key, value))
        self.buckets.setdefault(bucket, {})[key] = value

    async def delete(self, bucket: str, key: str) -> None:
        self._check("bucket")
        self.buckets.get(bucket, {}).pop(key, None)

    async def create_bucket(self, bucket: str, child: str | None = None) -> None:
        self._check("bucket")
        self.created.append((bucket, child))


class FakeExecution:
    """Records dispatched actions and serves a canned status payload."""

    def __init__(self) -> None:
        self.actions: list[tuple[PipelineAction, str]] = []
        self.status_calls = 0
        self.payload: dict[str, Any] = {"status": "", "groups": {}, "nodes": {}}
        self.fail = False

    async def dispatch(self, action: PipelineAction, pipeline: str) -> Any:
        if self.fail:
            raise NetworkFailure(f"{action.value} unreachable", endpoint=action.value)
        self.actions.append((action, pipeline))
        return "ok"

    async def status(self, pipeline: str) -> dict[str, Any]:
        self.status_calls += 1
        if self.fail:
            raise NetworkFailure("status unreachable", endpoint=f"status/{pipeline}")
        return self.payload


class FakeSecrets:
    def __init__(self) -> None:
        self.values: list[str] = []

    async def encrypt(self, value: str) -> str:
        self.values.append(value)
        return f"enc({value})"


class RecordingRenderer:
    """Renderer that keeps every call for assertions."""

    def __init__(self) -> None:
        self.rendered: list[PipelineGraph] = []
        self.group_colors: dict[str, str] = {}
        self.container_fills: dict[str, Any] = {}
        self.readings: list[Any] = []
        self.notices: list[tuple[str, Severity]] = []
        self.executing: list[bool] = []
        self.hits: list[str] = []
        self.status_errors: list[str | None] = []

    def render_graph(self, graph: PipelineGraph) -> None:
        self.rendered.append(graph)

    def paint_group(self, group_id: str, color: str) -> None:
        self.group_colors[group_id] = color

    def paint_container(self, container_id: str, fill: Any) -> None:
        self.container_fills[container_id] = fill

    def update_gauges(self, readings: Any) -> None:
        self.readings.append(readings)

    def show_status_error(self, error: str | None) -> None:
        self.status_errors.append(error)

    def hit_test(self, point: Point) -> list[str]:
        return list(self.hits)

    def notify(self, message: str, severity: Severity) -> None:
        self.notices.append((message, severity))

    def set_executing(self, executing: bool) -> None:
        self.executing.append(executing)

    def severities(self) -> list[Severity]:
        return [severity for _, severity in self.notices]


def build_pipeline(title: str = "Word Count") -> tuple[PipelineGraph, dict[str, str]]:
    """A source feeding two containers, both inside one group of scale 2."""
    graph = PipelineGraph(title=title)
    ids = {
        "source": graph.add_node(SourceNode(name="feed", sourcetype="bucket")),
        "group": graph.add_node(
            KubernetesGroup(name="workers", scale=2, position=Point(x=0, y=0))
        ),
        "split": graph.add_node(ContainerNode(name="split", cpu="500m", memory="256Mi")),
        "count": graph.add_node(ContainerNode(name="count", cpu="250m", memory="128Mi")),
    }
    graph.embed(ids["group"], ids["split"])
    graph.embed(ids["group"], ids["count"])
    graph.add_link(ids["source"], {"id": ids["split"], "port": "a"})
    graph.add_link(
        {"id": ids["split"], "port": "o"},
        {"id": ids["count"], "port": "a"},
        attrs={"path": "words", "pattern": r".*\.txt", "watch": True},
    )
    return graph, ids


@pytest.fixture
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture
def execution() -> FakeExecution:
    return FakeExecution()


@pytest.fixture
def secrets() -> FakeSecrets:
    return FakeSecrets()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def settings() -> AppSettings:
    # Long intervals keep the timers from firing during a test.
    return AppSettings(poll_interval=3600, autosave_interval=3600)


@pytest.fixture
def session() -> PipelineSession:
    return PipelineSession()


@pytest.fixture
def controller(
    persistence: FakePersistence,
    execution: FakeExecution,
    renderer: RecordingRenderer,
    secrets: FakeSecrets,
    settings: AppSettings,
    session: PipelineSession,
):
    return PipelineController(
        persistence,
        execution,
        renderer,
        secrets=secrets,
        settings=settings,
        session=session,
    )


@pytest.fixture
def pipeline() -> tuple[PipelineGraph, dict[str, str]]:
    return build_pipeline()
