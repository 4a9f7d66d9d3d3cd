"""Inspect command: print the visible hierarchy of a dataset."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from ...core.explorer import MindmapExplorer
from ...core.hierarchy import TreeNode
from ._session import build_settings, open_session, resolve_node

console = Console()


def _node_text(node: TreeNode) -> str:
    marker = "▸" if node.is_collapsed else ("•" if node.is_leaf else "▾")
    color = node.branch_color or "white"
    extras = ""
    if node.has_annotation:
        extras += " [dim]ⓘ[/dim]"
    if node.has_link:
        extras += " [dim]↗[/dim]"
    label = escape(node.label)
    return f"[{color}]{marker}[/{color}] {label} [dim]#{node.identity}[/dim]{extras}"


def render_tree(explorer: MindmapExplorer) -> Tree:
    """Visible hierarchy as a rich Tree."""
    hierarchy = explorer.hierarchy
    branches: dict = {}
    tree = Tree(f"[bold]{escape(explorer.title)}[/bold]")
    for node in hierarchy.visible_descendants():
        parent_branch = branches.get(node.parent, tree)
        branches[node.identity] = parent_branch.add(_node_text(node))
    return tree


def render_table(explorer: MindmapExplorer) -> Table:
    """Visible hierarchy as a table with layout coordinates."""
    table = Table(title=explorer.title, show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Label")
    table.add_column("Depth", justify="right")
    table.add_column("Position", justify="right")
    table.add_column("State")
    for node in explorer.hierarchy.visible_descendants():
        x, y = node.position
        state = "collapsed" if node.is_collapsed else ("leaf" if node.is_leaf else "expanded")
        table.add_row(
            escape(str(node.identity)),
            escape(node.label),
            str(node.depth),
            f"({x:g}, {y:g})",
            state,
        )
    return table


def inspect_main(
    dataset: str | None = typer.Argument(
        None, help="Dataset name (defaults to the configured dataset)"
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
    expand_all: bool = typer.Option(
        False, "--expand-all", help="Expand every node before printing"
    ),
    click: list[str] | None = typer.Option(
        None, "--click", help="Toggle a node (id or label); repeatable"
    ),
    table: bool = typer.Option(
        False, "--table", "-t", help="Print a table with coordinates instead of a tree"
    ),
) -> None:
    """🔎 Print the visible hierarchy of a dataset.

    [bold cyan]Examples:[/bold cyan]

    [green]Default dataset, initial (collapsed) view:[/green]
        $ mindmap-explorer inspect

    [green]Everything, with coordinates:[/green]
        $ mindmap-explorer inspect Taxes --expand-all --table
    """
    settings = build_settings(config_file, data_dir)
    explorer = open_session(settings, dataset)
    if expand_all:
        explorer.expand_all()
    for value in click or []:
        explorer.click(resolve_node(explorer, value))
    explorer.settle()

    console.print(render_table(explorer) if table else render_tree(explorer))
    console.print(
        f"[dim]{len(explorer.visible_ids())} of {len(explorer.hierarchy)} nodes visible[/dim]"
    )
