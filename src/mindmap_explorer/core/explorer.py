"""Interaction layer: turns user gestures into hierarchy changes and frames.

Every structural event runs the same pipeline, synchronously and over the
whole visible tree:

    hierarchy mutation → layout → reconcile → center the camera

Only the resulting transitions are spread over time; ``tick()`` advances
them once per host frame.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from functools import partial
from typing import Any

from loguru import logger

from ..config.settings import ExplorerSettings
from .animation import Animator
from .datasets import DatasetLoader
from .exceptions import (
    DatasetLoadError,
    ExplorerNotReadyError,
    HiddenNodeError,
    MalformedHierarchyError,
    RootCollapseError,
    UnknownNodeError,
)
from .hierarchy import Hierarchy, TreeNode
from .ingest import build_hierarchy, dataset_title, parse_records
from .layout import LayoutEngine, label_footprint
from .models import NodeId, Point
from .reconciler import FramePlan, Reconciler
from .render import DetailPresenter, RenderTarget, node_visual
from .viewport import ViewportController, ViewportTransform


class MindmapExplorer:
    """One interactive diagram session bound to a render target."""

    def __init__(
        self,
        settings: ExplorerSettings,
        target: RenderTarget,
        presenter: DetailPresenter | None = None,
        loader: DatasetLoader | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.target = target
        self.presenter = presenter
        self.loader = loader or DatasetLoader(settings.data_dir, settings.default_dataset)

        self.animator = Animator(clock=clock)
        self.layout = LayoutEngine(
            sibling_spacing=settings.sibling_spacing,
            level_spacing=settings.level_spacing,
            orientation=settings.orientation,
            footprint=lambda node: label_footprint(
                node.label, base_height=settings.base_height
            ),
        )
        self.reconciler = Reconciler(
            target,
            self.animator,
            duration=settings.duration,
            visual=partial(
                node_visual, width=settings.node_width, base_height=settings.base_height
            ),
        )
        self.viewport = ViewportController(
            settings.viewport_width,
            settings.viewport_height,
            target,
            self.animator,
            scale_extent=settings.scale_extent,
            duration=settings.duration,
            focus_scale=settings.focus_scale,
        )

        self.hierarchy: Hierarchy | None = None
        self.dataset_name: str | None = None
        self.title = ""
        self.status = ""

    # ── loading ─────────────────────────────────────────────────────────

    @property
    def ready(self) -> bool:
        return self.hierarchy is not None

    def load(self, name: str | None = None) -> bool:
        """Load a dataset by name (the default one when ``name`` is empty).

        On failure the status message is set, nothing is mounted, and False
        is returned. There is no automatic retry.
        """
        self.status = "Loading..."
        try:
            dataset = self.loader.load(name)
        except DatasetLoadError as e:
            return self._fail(e)
        source = f"{self.loader.data_dir.name}/{dataset.path.name}"
        return self.load_data(dataset.data, dataset.name, source=source)

    def load_data(
        self, data: Any, name: str | None = None, source: str | None = None
    ) -> bool:
        """Start a session from already-decoded dataset data.

        ``source`` is the location reported in the status message on failure.
        A failed load leaves the current session untouched.
        """
        try:
            record = parse_records(data)
            hierarchy = build_hierarchy(
                record, palette=self.settings.palette, root_color=self.settings.root_color
            )
        except MalformedHierarchyError as e:
            return self._fail(e, source or name)

        self._teardown()
        self.hierarchy = hierarchy
        self.dataset_name = name
        self.title = dataset_title(hierarchy.root.label)
        self.status = ""

        # start with every first-generation branch folded to a single box
        for child_id in hierarchy.root.children:
            hierarchy.collapse_subtree(child_id)

        self._refresh(origin=self.viewport.transform.invert(self.viewport.center))
        self.viewport.center_on(hierarchy.root.position)
        logger.info(
            f"Loaded {self.title!r}: {len(hierarchy)} nodes, "
            f"{len(hierarchy.root.children)} branches"
        )
        return True

    def _fail(
        self,
        error: DatasetLoadError | MalformedHierarchyError,
        source: str | None = None,
    ) -> bool:
        url = error.context.get("url") or source or "dataset"
        self.status = f"Error loading: {url}"
        logger.error(f"{self.status} ({error})")
        return False

    def _teardown(self) -> None:
        if self.hierarchy is not None:
            self.reconciler.clear()
            self.hierarchy = None

    # ── structural events ───────────────────────────────────────────────

    def _require(self) -> Hierarchy:
        if self.hierarchy is None:
            raise ExplorerNotReadyError("No dataset loaded")
        return self.hierarchy

    def _refresh(self, origin: Point | None = None) -> FramePlan:
        hierarchy = self._require()
        self.layout.run(hierarchy, origin=origin)
        return self.reconciler.reconcile(hierarchy)

    def click(self, node_id: NodeId) -> FramePlan:
        """Toggle a node's children and recenter on it.

        Clicking the root or a leaf changes nothing structurally; the camera
        still recenters on the clicked node.

        Nodes inside a collapsed subtree raise ``HiddenNodeError`` and leave
        the session unchanged.
        """
        hierarchy = self._require()
        node = hierarchy[node_id]
        if not hierarchy.is_visible(node_id):
            raise HiddenNodeError(
                f"Node {node_id!r} is not visible", context={"node_id": node_id}
            )
        try:
            hierarchy.toggle(node_id)
        except RootCollapseError:
            logger.debug("Ignoring click on expanded root")
        plan = self._refresh()
        self.viewport.center_on(node.position)
        return plan

    def expand_all(self) -> FramePlan:
        hierarchy = self._require()
        hierarchy.expand_all()
        plan = self._refresh()
        self.viewport.center_on(hierarchy.root.position)
        return plan

    def collapse_all(self) -> FramePlan:
        hierarchy = self._require()
        hierarchy.collapse_all()
        plan = self._refresh()
        self.viewport.center_on(hierarchy.root.position)
        return plan

    def reset_zoom(self) -> ViewportTransform:
        """Recenter on the root."""
        return self.viewport.center_on(self._require().root.position)

    # ── continuous input ────────────────────────────────────────────────

    def pan(self, dx: float, dy: float) -> ViewportTransform:
        self._require()
        return self.viewport.pan_by(dx, dy)

    def zoom(self, factor: float, anchor: Point | None = None) -> ViewportTransform:
        self._require()
        return self.viewport.zoom_by(factor, anchor)

    def tick(self, now: float | None = None) -> dict:
        """Advance every running transition; call once per frame."""
        self._require()
        return self.animator.tick(now)

    def settle(self) -> None:
        """Finish every running transition at once (snapshots, tests)."""
        self._require()
        self.animator.tick(math.inf)

    # ── details ─────────────────────────────────────────────────────────

    def show_details(self, node_id: NodeId, kind: str = "info") -> bool:
        """Open the node's annotation ("info") or external link ("link").

        Returns False when the node has nothing of that kind or no presenter
        is attached.
        """
        if kind not in ("info", "link"):
            raise ValueError(f"Unknown detail kind {kind!r}")
        node: TreeNode = self._require()[node_id]
        if self.presenter is None:
            logger.warning("No detail presenter attached")
            return False
        if kind == "info" and node.has_annotation:
            self.presenter.open_info(node.label, node.annotation)
            return True
        if kind == "link" and node.has_link:
            self.presenter.open_link(node.label, node.link.strip())
            return True
        return False

    # ── queries ─────────────────────────────────────────────────────────

    def visible_ids(self) -> list[NodeId]:
        return [n.identity for n in self._require().visible_descendants()]

    def find(self, label: str) -> TreeNode:
        """First node (pre-order, hidden ones included) with the given label."""
        for node in self._require().descendants():
            if node.label == label:
                return node
        raise UnknownNodeError(f"No node labelled {label!r}", context={"label": label})
