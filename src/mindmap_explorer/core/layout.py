"""Tidy-tree layout for the visible part of a hierarchy.

Design Principles:
    - Deterministic: same visible shape and spacing → same coordinates
    - Main axis is a pure function of depth (``depth × level_spacing``)
    - Sibling subtrees never overlap on the cross axis
    - A parent sits at the midpoint of its first and last child

Algorithm: nodes are visited children-before-parent. Each subtree keeps a
contour, one ``(low, high)`` cross-axis extent per relative depth. Child
subtrees are placed left to right. By default each one starts
``sibling_spacing`` past the full cross-axis span of the subtrees already
placed; in compact mode it is pushed only far enough to clear them at every
shared depth. Absolute coordinates are then resolved top-down.

Time Complexity: O(n × h) for n visible nodes and visible height h.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from loguru import logger

from ..config.defaults import (
    DEFAULT_BASE_HEIGHT,
    DEFAULT_LEVEL_SPACING,
    DEFAULT_SIBLING_SPACING,
    LABEL_CHARS_PER_LINE,
    LABEL_LINE_HEIGHT,
    LABEL_PADDING,
    ORIENTATIONS,
)
from .hierarchy import Hierarchy, TreeNode
from .models import NodeId, Point

Footprint = Callable[[TreeNode], float]
Contour = list[tuple[float, float]]


def label_footprint(
    label: str,
    base_height: float = DEFAULT_BASE_HEIGHT,
    chars_per_line: int = LABEL_CHARS_PER_LINE,
    line_height: float = LABEL_LINE_HEIGHT,
    padding: float = LABEL_PADDING,
) -> float:
    """Cross-axis extent of a node box whose height grows with its label.

    Example:
        >>> label_footprint("VAT")
        60
        >>> label_footprint("x" * 100)  # four wrapped lines
        92
    """
    lines = math.ceil(len(label) / chars_per_line)
    return max(base_height, padding + lines * line_height)


class LayoutEngine:
    """Assigns positions to every visible node of a hierarchy."""

    def __init__(
        self,
        sibling_spacing: float = DEFAULT_SIBLING_SPACING,
        level_spacing: float = DEFAULT_LEVEL_SPACING,
        orientation: str = "horizontal",
        footprint: Footprint | None = None,
        compact: bool = False,
    ) -> None:
        """Initialize the layout engine.

        Args:
            sibling_spacing: Minimum cross-axis gap between adjacent node extents
                (centre distance when no footprint is given)
            level_spacing: Main-axis distance between depth levels
            orientation: "horizontal" puts depth on x, "vertical" puts it on y
            footprint: Optional per-node cross-axis extent
            compact: Separate sibling subtrees only at the depths they share;
                tighter, but a subtree may then reach into the cross-axis span
                of a deeper neighbour
        """
        if sibling_spacing <= 0 or level_spacing <= 0:
            raise ValueError("sibling_spacing and level_spacing must be positive")
        if orientation not in ORIENTATIONS:
            raise ValueError(f"Unknown orientation {orientation!r}")
        self.sibling_spacing = sibling_spacing
        self.level_spacing = level_spacing
        self.orientation = orientation
        self.footprint = footprint
        self.compact = compact

    def _half_extent(self, node: TreeNode) -> float:
        return self.footprint(node) / 2 if self.footprint else 0.0

    def _point(self, depth: int, cross: float) -> Point:
        main = depth * self.level_spacing
        if self.orientation == "horizontal":
            return Point(main, cross)
        return Point(cross, main)

    def compute(self, hierarchy: Hierarchy) -> dict[NodeId, Point]:
        """Positions for the visible nodes, without touching node state."""
        visible = hierarchy.visible_descendants()
        offsets: dict[NodeId, float] = {}
        contours: dict[NodeId, Contour] = {}

        # Reversed pre-order visits every child before its parent
        for node in reversed(visible):
            half = self._half_extent(node)
            children = node.visible_children
            if not children:
                contours[node.identity] = [(-half, half)]
                continue

            merged: Contour = []
            placements: list[float] = []
            for child_id in children:
                contour = contours.pop(child_id)
                shift = 0.0
                if merged and self.compact:
                    shared = min(len(merged), len(contour))
                    shift = max(
                        merged[d][1] - contour[d][0] + self.sibling_spacing
                        for d in range(shared)
                    )
                elif merged:
                    shift = (
                        max(high for _, high in merged)
                        - min(low for low, _ in contour)
                        + self.sibling_spacing
                    )
                placements.append(shift)
                for d, (low, high) in enumerate(contour):
                    low, high = low + shift, high + shift
                    if d < len(merged):
                        merged[d] = (min(merged[d][0], low), max(merged[d][1], high))
                    else:
                        merged.append((low, high))

            middle = (placements[0] + placements[-1]) / 2
            for child_id, placement in zip(children, placements, strict=True):
                offsets[child_id] = placement - middle
            contours[node.identity] = [(-half, half)] + [
                (low - middle, high - middle) for low, high in merged
            ]

        cross: dict[NodeId, float] = {}
        positions: dict[NodeId, Point] = {}
        for node in visible:
            if node.identity == visible[0].identity:
                cross[node.identity] = 0.0
            else:
                cross[node.identity] = cross[node.parent] + offsets[node.identity]
            positions[node.identity] = self._point(
                node.depth - visible[0].depth, cross[node.identity]
            )
        return positions

    def run(self, hierarchy: Hierarchy, origin: Point | None = None) -> dict[NodeId, Point]:
        """Lay out the hierarchy and update node positions.

        Nodes laid out by the previous pass move their ``position`` into
        ``previous_position`` first. Nodes that just became visible take the
        previous position of their nearest previously laid-out ancestor as
        their entry point; a root seen for the first time enters at
        ``origin`` (or in place).

        Returns:
            Mapping of visible node identity to its new position
        """
        previously = hierarchy.laid_out
        for node_id in previously:
            node = hierarchy[node_id]
            if node.position is not None:
                node.previous_position = node.position

        positions = self.compute(hierarchy)

        for node_id, point in positions.items():
            node = hierarchy[node_id]
            node.position = point
            if node_id in previously:
                continue
            entry = None
            for ancestor in hierarchy.ancestors(node_id):
                if ancestor.identity in previously:
                    entry = ancestor.previous_position
                    break
            node.previous_position = entry or origin or point

        hierarchy.laid_out = set(positions)
        logger.debug(
            f"Layout: {len(positions)} visible nodes, "
            f"{len(positions.keys() - previously)} entering, "
            f"{len(previously - positions.keys())} leaving"
        )
        return positions
