"""Contracts for the collaborators that paint the diagram and show details.

The engine decides *what* must appear, move or disappear; a ``RenderTarget``
decides how. Targets are expected to run each ``animate_*`` call as a
transition of the given duration and to let a newer call for the same
element replace an unfinished one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..config.defaults import (
    COLLAPSED_ICON_COLOR,
    COLLAPSED_TEXT_COLOR,
    DEFAULT_BASE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    DEFAULT_ROOT_COLOR,
    EXPANDED_FILL,
    EXPANDED_ICON_COLOR,
    EXPANDED_TEXT_COLOR,
)
from .layout import label_footprint
from .models import EdgeGeometry, NodeId, Point

if TYPE_CHECKING:
    from .hierarchy import TreeNode
    from .viewport import ViewportTransform


@dataclass(frozen=True)
class NodeVisual:
    """Style attributes of a node box, derived from the node's state."""

    label: str
    color: str
    fill: str
    text_color: str
    icon_color: str
    width: float
    height: float
    collapsed: bool
    has_annotation: bool = False
    has_link: bool = False


def node_visual(
    node: TreeNode,
    width: float = DEFAULT_NODE_WIDTH,
    base_height: float = DEFAULT_BASE_HEIGHT,
) -> NodeVisual:
    """Derive the visual props for a node.

    Collapsed nodes are filled with their branch colour and use dark text;
    expanded nodes and leaves are outlined.
    """
    color = node.branch_color or DEFAULT_ROOT_COLOR
    collapsed = node.is_collapsed
    return NodeVisual(
        label=node.label,
        color=color,
        fill=color if collapsed else EXPANDED_FILL,
        text_color=COLLAPSED_TEXT_COLOR if collapsed else EXPANDED_TEXT_COLOR,
        icon_color=COLLAPSED_ICON_COLOR if collapsed else EXPANDED_ICON_COLOR,
        width=width,
        height=label_footprint(node.label, base_height=base_height),
        collapsed=collapsed,
        has_annotation=node.has_annotation,
        has_link=node.has_link,
    )


@runtime_checkable
class RenderTarget(Protocol):
    """Drawing surface driven by the reconciler and viewport controller."""

    def mount_node(self, node_id: NodeId, position: Point, visual: NodeVisual) -> None: ...

    def animate_node(
        self, node_id: NodeId, position: Point, visual: NodeVisual, duration: float
    ) -> None: ...

    def unmount_node(self, node_id: NodeId) -> None: ...

    def mount_edge(self, child_id: NodeId, geometry: EdgeGeometry) -> None: ...

    def animate_edge(
        self, child_id: NodeId, geometry: EdgeGeometry, duration: float
    ) -> None: ...

    def unmount_edge(self, child_id: NodeId) -> None: ...

    def set_viewport_transform(
        self, transform: ViewportTransform, duration: float | None = None
    ) -> None: ...


@runtime_checkable
class DetailPresenter(Protocol):
    """Shows a node's free-text body or external link."""

    def open_info(self, title: str, body: str) -> None: ...

    def open_link(self, title: str, url: str) -> None: ...
