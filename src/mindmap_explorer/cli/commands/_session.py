"""Helpers shared by the commands that open an explorer session."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from ...config.settings import ExplorerSettings, load_settings
from ...core.exceptions import ConfigError, HierarchyError
from ...core.explorer import MindmapExplorer
from ...core.models import NodeId
from ...render.svg import SvgRenderTarget

console = Console()


def build_settings(
    config_file: Path | None, data_dir: Path | None, **overrides
) -> ExplorerSettings:
    """Load settings or exit with a readable error."""
    try:
        return load_settings(config_file, data_dir=data_dir, **overrides)
    except ConfigError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(2) from e


def open_session(settings: ExplorerSettings, dataset: str | None) -> MindmapExplorer:
    """Load a dataset into an SVG-backed session, exiting on failure."""
    target = SvgRenderTarget(
        settings.viewport_width, settings.viewport_height, settings.orientation
    )
    explorer = MindmapExplorer(settings, target)
    if not explorer.load(dataset):
        console.print(f"[red]✗ {explorer.status}[/red]")
        raise typer.Exit(1)
    target.title = explorer.title
    return explorer


def resolve_node(explorer: MindmapExplorer, value: str) -> NodeId:
    """Interpret a CLI node reference as an identity, else as a label."""
    hierarchy = explorer.hierarchy
    candidates: list[NodeId] = [value]
    if value.lstrip("-").isdigit():
        candidates.insert(0, int(value))
    node_id = next((c for c in candidates if c in hierarchy), None)
    if node_id is None:
        try:
            node_id = explorer.find(value).identity
        except HierarchyError as e:
            console.print(f"[red]✗ Unknown node: {value}[/red]")
            raise typer.Exit(1) from e
    if not hierarchy.is_visible(node_id):
        console.print(f"[red]✗ Node not visible: {value}[/red]")
        raise typer.Exit(1)
    return node_id
