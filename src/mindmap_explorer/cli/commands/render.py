"""Render command: write an SVG snapshot of a dataset."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from ._session import build_settings, open_session, resolve_node

console = Console()


def render_main(
    dataset: str | None = typer.Argument(
        None, help="Dataset name (defaults to the configured dataset)"
    ),
    output: Path = typer.Option(
        Path("mindmap.svg"), "--output", "-o", help="SVG file to write"
    ),
    data_dir: Path | None = typer.Option(
        None,
        "--data-dir",
        "-d",
        help="Directory containing dataset files",
        file_okay=False,
        dir_okay=True,
    ),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="JSON settings file", exists=True, dir_okay=False
    ),
    expand_all: bool = typer.Option(False, "--expand-all", help="Expand every node"),
    collapse_all: bool = typer.Option(
        False, "--collapse-all", help="Collapse everything below the first generation"
    ),
    click: list[str] | None = typer.Option(
        None, "--click", help="Toggle a node (id or label); repeatable"
    ),
    orientation: str | None = typer.Option(
        None, "--orientation", help="horizontal or vertical"
    ),
    width: int | None = typer.Option(None, "--width", min=1, help="Viewport width"),
    height: int | None = typer.Option(None, "--height", min=1, help="Viewport height"),
) -> None:
    """🖼️  Write an SVG snapshot of a dataset after optional interactions.

    [bold cyan]Examples:[/bold cyan]

    [green]Initial view of the default dataset:[/green]
        $ mindmap-explorer render -o map.svg

    [green]Open one branch:[/green]
        $ mindmap-explorer render Taxes --click "Income Tax" -o taxes.svg
    """
    settings = build_settings(
        config_file,
        data_dir,
        orientation=orientation,
        viewport_width=width,
        viewport_height=height,
    )
    explorer = open_session(settings, dataset)

    if expand_all:
        explorer.expand_all()
    if collapse_all:
        explorer.collapse_all()
    for value in click or []:
        explorer.click(resolve_node(explorer, value))
    explorer.settle()

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(explorer.target.to_svg(), encoding="utf-8")
    console.print(
        f"[green]✓[/green] Wrote {output} "
        f"({len(explorer.visible_ids())} visible nodes of {len(explorer.hierarchy)})"
    )
