"""Main entry point for the mindmap-explorer CLI."""

from __future__ import annotations

import sys

import typer
from loguru import logger
from rich.console import Console

from .. import __version__
from .commands.inspect import inspect_main
from .commands.render import render_main
from .commands.serve import serve_main

console = Console()

app = typer.Typer(
    name="mindmap-explorer",
    help="🌳 Explore large hierarchies as collapsible tree diagrams",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def setup_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr at WARNING (or DEBUG when verbose)."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
        rich_help_panel="🔧 Global Options",
    ),
) -> None:
    """🌳 mindmap-explorer - interactive tree diagrams for JSON/XML hierarchies."""
    setup_logging(verbose)


app.command("inspect")(inspect_main)
app.command("render")(render_main)
app.command("serve")(serve_main)


@app.command("version")
def version() -> None:
    """Show the installed version."""
    console.print(f"mindmap-explorer [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
