"""HTTP server exposing datasets and SVG snapshots.

Endpoints:
    GET /api/health              - liveness and available dataset names
    GET /api/datasets/{name}     - validated hierarchy as nested JSON
    GET /api/render/{name}.svg   - snapshot of the initial (or fully expanded) view

Every request builds its own explorer session, so no view state is shared
or kept between requests.
"""

from __future__ import annotations

import socket
from pathlib import Path

import orjson
import typer
import uvicorn
from fastapi import FastAPI, Response
from loguru import logger
from rich.console import Console
from rich.panel import Panel

from ...config.settings import ExplorerSettings
from ...core.datasets import DatasetLoader
from ...core.exceptions import DatasetLoadError, MalformedHierarchyError
from ...core.explorer import MindmapExplorer
from ...core.ingest import parse_records
from ...render.svg import SvgRenderTarget
from ._session import build_settings

console = Console()


def find_free_port(start_port: int = 8080, end_port: int = 8099) -> int:
    """Find a free port in the given range.

    Raises:
        OSError: If no free ports available in range
    """
    for test_port in range(start_port, end_port + 1):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
                s.bind(("", test_port))
                return test_port
        except OSError:
            continue
    raise OSError(f"No free ports available in range {start_port}-{end_port}")


def _error(status_code: int, message: str) -> Response:
    return Response(
        content=orjson.dumps({"error": message}),
        status_code=status_code,
        media_type="application/json",
    )


def create_app(settings: ExplorerSettings) -> FastAPI:
    """Create the FastAPI application serving ``settings.data_dir``."""
    app = FastAPI(title="mindmap-explorer")
    loader = DatasetLoader(settings.data_dir, settings.default_dataset)

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "datasets": loader.available()}

    @app.get("/api/datasets/{name}")
    async def get_dataset(name: str) -> Response:
        try:
            record = parse_records(loader.load(name).data)
        except DatasetLoadError as e:
            logger.warning(f"Dataset request failed: {e}")
            return _error(404, str(e))
        except MalformedHierarchyError as e:
            logger.warning(f"Malformed dataset {name!r}: {e}")
            return _error(422, str(e))
        return Response(
            content=record.model_dump_json(exclude_none=True),
            media_type="application/json",
            headers={"Cache-Control": "no-cache"},
        )

    @app.get("/api/render/{name}.svg")
    async def render_dataset(name: str, expand_all: bool = False) -> Response:
        target = SvgRenderTarget(
            settings.viewport_width, settings.viewport_height, settings.orientation
        )
        explorer = MindmapExplorer(settings, target, loader=loader)
        if not explorer.load(name):
            return _error(404, explorer.status)
        if expand_all:
            explorer.expand_all()
        explorer.settle()
        target.title = explorer.title
        return Response(content=target.to_svg(), media_type="image/svg+xml")

    return app


def serve_main(
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
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int | None = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to bind (first free port in 8080-8099 when omitted)",
        min=1024,
        max=65535,
    ),
) -> None:
    """🌐 Serve datasets and SVG snapshots over HTTP."""
    settings = build_settings(config_file, data_dir)
    port = port or find_free_port()
    console.print(
        Panel.fit(
            f"[green]✓[/green] Serving [bold]{settings.data_dir}[/bold]\n"
            f"URL: [cyan]http://{host}:{port}/api/health[/cyan]\n\n"
            "Press Ctrl+C to stop",
            title="mindmap-explorer",
            border_style="green",
        )
    )
    uvicorn.run(create_app(settings), host=host, port=port, log_level="warning")
