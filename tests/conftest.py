"""Shared fixtures for mindmap-explorer tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from loguru import logger

from mindmap_explorer.config.settings import ExplorerSettings
from mindmap_explorer.core.hierarchy import Hierarchy
from mindmap_explorer.core.ingest import build_hierarchy, parse_records


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class RecordingTarget:
    """Render target that records every call and tracks live elements."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.live_nodes: dict = {}
        self.live_edges: dict = {}
        self.viewport = None

    def mount_node(self, node_id, position, visual):
        assert node_id not in self.live_nodes, f"node {node_id!r} mounted twice"
        self.live_nodes[node_id] = (position, visual)
        self.calls.append(("mount_node", node_id, position))

    def animate_node(self, node_id, position, visual, duration):
        assert node_id in self.live_nodes, f"node {node_id!r} animated before mount"
        self.live_nodes[node_id] = (position, visual)
        self.calls.append(("animate_node", node_id, position))

    def unmount_node(self, node_id):
        del self.live_nodes[node_id]
        self.calls.append(("unmount_node", node_id))

    def mount_edge(self, child_id, geometry):
        assert child_id not in self.live_edges, f"edge {child_id!r} mounted twice"
        self.live_edges[child_id] = geometry
        self.calls.append(("mount_edge", child_id, geometry))

    def animate_edge(self, child_id, geometry, duration):
        assert child_id in self.live_edges, f"edge {child_id!r} animated before mount"
        self.live_edges[child_id] = geometry
        self.calls.append(("animate_edge", child_id, geometry))

    def unmount_edge(self, child_id):
        del self.live_edges[child_id]
        self.calls.append(("unmount_edge", child_id))

    def set_viewport_transform(self, transform, duration=None):
        self.viewport = transform
        self.calls.append(("set_viewport_transform", transform, duration))

    def named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class RecordingPresenter:
    def __init__(self) -> None:
        self.opened: list[tuple[str, str, str]] = []

    def open_info(self, title, body):
        self.opened.append(("info", title, body))

    def open_link(self, title, url):
        self.opened.append(("link", title, url))


TAXES = {
    "name": "Taxes",
    "children": [
        {
            "name": "Income Tax",
            "children": [
                {"name": "Federal"},
                {"name": "Cantonal", "children": [{"name": "Zurich"}]},
            ],
        },
        {
            "name": "VAT",
            "children": [
                {"name": "Standard Rate", "description": "<b>8.1%</b> on most goods"},
                {"name": "Reduced Rate", "link": "https://example.org/vat"},
            ],
        },
    ],
}

# root → A, B; A → A1, A2; A1 → A1a, A1b; B → B1; B1 → B1a
FOUR_LEVELS = {
    "name": "root",
    "children": [
        {
            "name": "A",
            "children": [
                {"name": "A1", "children": [{"name": "A1a"}, {"name": "A1b"}]},
                {"name": "A2"},
            ],
        },
        {"name": "B", "children": [{"name": "B1", "children": [{"name": "B1a"}]}]},
    ],
}


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI invocations point loguru at a captured stderr; drop those sinks."""
    yield
    logger.remove()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def target() -> RecordingTarget:
    return RecordingTarget()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture
def taxes_data() -> dict:
    return json.loads(json.dumps(TAXES))


@pytest.fixture
def four_level_data() -> dict:
    return json.loads(json.dumps(FOUR_LEVELS))


@pytest.fixture
def taxes(taxes_data) -> Hierarchy:
    """Taxes hierarchy, fully expanded. Identities 1-8 in pre-order."""
    return build_hierarchy(parse_records(taxes_data))


@pytest.fixture
def four_levels(four_level_data) -> Hierarchy:
    return build_hierarchy(parse_records(four_level_data))


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A ``data`` directory holding the Taxes dataset as JSON."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "Taxes.json").write_text(json.dumps(TAXES), encoding="utf-8")
    return directory


@pytest.fixture
def settings(data_dir: Path) -> ExplorerSettings:
    return ExplorerSettings(
        data_dir=data_dir,
        default_dataset="Taxes",
        viewport_width=1000,
        viewport_height=800,
        duration=0.5,
    )
