"""Command line entry point: open the TUI or inspect a stored pipeline."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.tree import Tree

from pipedeck.api import ApiClient, HttpExecutionService, HttpPersistenceService
from pipedeck.constants import APP_TITLE
from pipedeck.controllers.resources import GaugeReadings, gauge_readings
from pipedeck.controllers.status import ReconcileResult, reconcile
from pipedeck.models.errors import PipelineError
from pipedeck.models.graph import KubernetesGroup, PipelineGraph, decode_document
from pipedeck.models.state.app_settings import AppSettings
from pipedeck.models.state.config_manager import ConfigManager
from pipedeck.models.telemetry import TelemetrySnapshot
from pipedeck.utils.resource_parser import format_bytes, format_millicores, parse_cpu, parse_memory

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = Path("~/.config/pipedeck/pipedeck.log")

app = typer.Typer(no_args_is_help=True, help=f"{APP_TITLE}: edit, run and watch container pipelines")
console = Console()


@dataclass
class CliContext:
    config: ConfigManager
    settings: AppSettings


def _configure_logging(level: str, log_file: Path | None = None) -> None:
    """Log to the console through rich, or to a file while the TUI owns the terminal."""
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(level=level.upper(), handlers=[handler], force=True)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, help="Settings file (default ~/.config/pipedeck/settings.yaml)."),
    server: Optional[str] = typer.Option(None, help="Server URL, overrides the settings file."),
    log_level: Optional[str] = typer.Option(None, help="Logging level, e.g. DEBUG."),
):
    """Load settings shared by every command."""
    manager = ConfigManager(config)
    settings = manager.load()
    updates: dict[str, str] = {}
    if server:
        updates["server_url"] = server
    if log_level:
        updates["log_level"] = log_level
    if updates:
        settings = settings.model_copy(update=updates)
    ctx.obj = CliContext(config=manager, settings=settings)


@app.command("open")
def open_pipeline(
    ctx: typer.Context,
    pipeline: Optional[str] = typer.Argument(None, help="Pipeline to open; defaults to the last one."),
):
    """Open the terminal UI."""
    from pipedeck.app import PipedeckApp

    state: CliContext = ctx.obj
    log_file = Path(state.settings.log_file) if state.settings.log_file else DEFAULT_LOG_FILE
    _configure_logging(state.settings.log_level, log_file.expanduser())
    PipedeckApp(state.settings, config=state.config, pipeline=pipeline).run()


async def _fetch_graph(client: ApiClient, settings: AppSettings, pipeline: str) -> PipelineGraph:
    document = await HttpPersistenceService(client).get(settings.pipeline_bucket, pipeline)
    graph = decode_document(document)
    graph.title = pipeline
    return graph


async def _fetch(settings: AppSettings, pipeline: str, with_status: bool):
    async with ApiClient(settings.server_url, timeout=settings.request_timeout) as client:
        graph = await _fetch_graph(client, settings, pipeline)
        if not with_status:
            return graph, None
        payload = await HttpExecutionService(client).status(pipeline)
        return graph, TelemetrySnapshot.from_payload(payload)


def _run_fetch(settings: AppSettings, pipeline: str, with_status: bool):
    try:
        return asyncio.run(_fetch(settings, pipeline, with_status))
    except PipelineError as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _graph_tree(graph: PipelineGraph, result: ReconcileResult | None = None) -> Tree:
    tree = Tree(f"[bold]{graph.title}[/]")
    for node in graph.nodes:
        if node.parent is not None:
            continue
        if isinstance(node, KubernetesGroup):
            color = result.group_colors.get(node.id) if result else None
            style = f"bold {color}" if color else "bold"
            branch = tree.add(f"[{style}]{node.name or node.id}[/] (x{node.scale}, {node.settype or '-'})")
            for child in graph.children(node.id):
                line = f"{child.name or child.id} [dim]{child.kind}[/]"
                fill = result.container_fills.get(child.id) if result else None
                if fill is not None:
                    line += f"  [{fill.color}]{fill.width}%[/]"
                branch.add(line)
        else:
            tree.add(f"{node.name or node.id} [dim]{node.kind}[/]")
    return tree


def _links_table(graph: PipelineGraph) -> Table:
    table = Table(title="Links")
    table.add_column("Type", style="bold")
    table.add_column("From")
    table.add_column("To")
    for link in graph.links:
        source = graph.get_node(link.source.id)
        target = graph.get_node(link.target.id)
        table.add_row(
            link.type,
            source.name if source is not None else str(link.source.id),
            target.name if target is not None else str(link.target.id),
        )
    return table


def _gauges_table(readings: GaugeReadings) -> Table:
    table = Table(title="Resources")
    table.add_column("Gauge")
    table.add_column("Percent", justify="right")
    table.add_row("Required CPU", f"{readings.required_cpu:.1f}%")
    table.add_row("Required memory", f"{readings.required_memory:.1f}%")
    table.add_row("Cluster CPU requested", f"{readings.available_cpu:.1f}%")
    table.add_row("Cluster memory requested", f"{readings.available_memory:.1f}%")
    return table


@app.command()
def show(ctx: typer.Context, pipeline: str):
    """Print a stored pipeline: its groups, containers and links."""
    state: CliContext = ctx.obj
    _configure_logging(state.settings.log_level)
    graph, _ = _run_fetch(state.settings, pipeline, with_status=False)

    console.print(_graph_tree(graph))
    if graph.links:
        console.print(_links_table(graph))
    containers = Table(title="Containers")
    containers.add_column("Name", style="bold")
    containers.add_column("Element")
    containers.add_column("CPU", justify="right")
    containers.add_column("Memory", justify="right")
    for node in graph.containers():
        containers.add_row(
            node.name or node.id,
            f"{node.element}:{node.version}" if node.version else node.element,
            format_millicores(parse_cpu(node.cpu)),
            format_bytes(parse_memory(node.memory)),
        )
    if graph.containers():
        console.print(containers)
    for problem in graph.load_problems:
        console.print(f"[yellow]warning:[/] {problem}")


@app.command()
def status(ctx: typer.Context, pipeline: str):
    """Print a one-shot reconciled status with resource gauges."""
    state: CliContext = ctx.obj
    _configure_logging(state.settings.log_level)
    graph, snapshot = _run_fetch(state.settings, pipeline, with_status=True)

    result = reconcile(graph, snapshot)
    console.print(f"Status: [bold]{result.status or 'unknown'}[/]")
    console.print(_graph_tree(graph, result))
    console.print(_gauges_table(gauge_readings(graph, snapshot)))


__all__ = [
    "app",
]
