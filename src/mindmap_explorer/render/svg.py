"""SVG render target.

Keeps the scene that results once every requested transition has finished
and serializes it as a standalone SVG document. Useful for snapshots, the
``render`` command and the HTTP server, and as a reference implementation
of the ``RenderTarget`` contract.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from loguru import logger

from ..config.defaults import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from ..core.models import EdgeGeometry, NodeId, Point
from ..core.render import NodeVisual
from ..core.viewport import IDENTITY, ViewportTransform

BACKGROUND = "#0d1117"
LINK_STROKE = "#30363d"


def diagonal_path(source: Point, target: Point, orientation: str = "horizontal") -> str:
    """Cubic Bézier between two nodes, bending along the main axis.

    Example:
        >>> diagonal_path(Point(0, 0), Point(300, 100))
        'M 0 0 C 150 0, 150 100, 300 100'
    """
    if orientation == "horizontal":
        mx = (source.x + target.x) / 2
        return (
            f"M {source.x:g} {source.y:g} C {mx:g} {source.y:g}, "
            f"{mx:g} {target.y:g}, {target.x:g} {target.y:g}"
        )
    my = (source.y + target.y) / 2
    return (
        f"M {source.x:g} {source.y:g} C {source.x:g} {my:g}, "
        f"{target.x:g} {my:g}, {target.x:g} {target.y:g}"
    )


@dataclass
class NodeElement:
    position: Point
    visual: NodeVisual


@dataclass
class SvgScene:
    """Elements currently mounted, in mount order."""

    nodes: dict[NodeId, NodeElement] = field(default_factory=dict)
    edges: dict[NodeId, EdgeGeometry] = field(default_factory=dict)
    transform: ViewportTransform = IDENTITY


class SvgRenderTarget:
    """Render target that settles each transition at its end state."""

    def __init__(
        self,
        width: float = DEFAULT_VIEWPORT_WIDTH,
        height: float = DEFAULT_VIEWPORT_HEIGHT,
        orientation: str = "horizontal",
        title: str = "",
    ) -> None:
        self.width = width
        self.height = height
        self.orientation = orientation
        self.title = title
        self.scene = SvgScene()

    # ── RenderTarget ────────────────────────────────────────────────────

    def mount_node(self, node_id: NodeId, position: Point, visual: NodeVisual) -> None:
        if node_id in self.scene.nodes:
            logger.warning(f"Node {node_id!r} mounted twice; replacing")
        self.scene.nodes[node_id] = NodeElement(position, visual)

    def animate_node(
        self, node_id: NodeId, position: Point, visual: NodeVisual, duration: float
    ) -> None:
        self.scene.nodes[node_id] = NodeElement(position, visual)

    def unmount_node(self, node_id: NodeId) -> None:
        self.scene.nodes.pop(node_id, None)

    def mount_edge(self, child_id: NodeId, geometry: EdgeGeometry) -> None:
        self.scene.edges[child_id] = geometry

    def animate_edge(self, child_id: NodeId, geometry: EdgeGeometry, duration: float) -> None:
        self.scene.edges[child_id] = geometry

    def unmount_edge(self, child_id: NodeId) -> None:
        self.scene.edges.pop(child_id, None)

    def set_viewport_transform(
        self, transform: ViewportTransform, duration: float | None = None
    ) -> None:
        self.scene.transform = transform

    # ── serialization ───────────────────────────────────────────────────

    def _edge_markup(self, geometry: EdgeGeometry) -> str:
        path = diagonal_path(geometry.source, geometry.target, self.orientation)
        return (
            f'<path class="link" d="{path}" fill="none" '
            f'stroke="{LINK_STROKE}" stroke-width="1.5"/>'
        )

    def _node_markup(self, node_id: NodeId, element: NodeElement) -> str:
        visual = element.visual
        x, y = element.position
        css_class = "node collapsed" if visual.collapsed else "node"
        icons = []
        if visual.has_link:
            icons.append("link")
        if visual.has_annotation:
            icons.append("info")
        icon_markup = "".join(
            f'<circle class="node-icon {name}" cx="{visual.width / 2 - 17:g}" '
            f'cy="{-visual.height / 2 + 18 + i * 20:g}" r="6" fill="{visual.icon_color}"/>'
            for i, name in enumerate(icons)
        )
        return (
            f'<g class="{css_class}" data-id="{escape(str(node_id))}" '
            f'transform="translate({x:g},{y:g})">'
            f'<rect x="{-visual.width / 2:g}" y="{-visual.height / 2:g}" '
            f'width="{visual.width:g}" height="{visual.height:g}" rx="6" ry="6" '
            f'fill="{visual.fill}" stroke="{visual.color}" stroke-width="1.5"/>'
            f'<text x="{-visual.width / 2 + 10:g}" y="0" dominant-baseline="middle" '
            f'fill="{visual.text_color}" font-size="13">{escape(visual.label)}</text>'
            f"{icon_markup}</g>"
        )

    def to_svg(self) -> str:
        """Serialize the current scene as an SVG document."""
        title = f"<title>{escape(self.title)}</title>" if self.title else ""
        edges = "\n    ".join(self._edge_markup(g) for g in self.scene.edges.values())
        nodes = "\n    ".join(
            self._node_markup(node_id, element)
            for node_id, element in self.scene.nodes.items()
        )
        return f"""<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {self.width:g} {self.height:g}" preserveAspectRatio="xMidYMid slice">
  {title}<rect width="100%" height="100%" fill="{BACKGROUND}"/>
  <g transform="{self.scene.transform}">
    {edges}
    {nodes}
  </g>
</svg>
"""
