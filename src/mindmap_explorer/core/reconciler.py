"""Map each new layout onto the previously rendered frame.

Every node and edge key is classified as exactly one of:

    - enter:  present now, absent before → mount at the entry point, animate in
    - update: present in both → animate from the on-screen value, restyle
    - exit:   present before, absent now → fold into the nearest visible
              ancestor, unmount once that transition completes

Edges are keyed by their child identity. Elements still folding away count
as rendered, so a key that comes back before its exit finishes is updated in
place rather than mounted a second time.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from ..config.defaults import DEFAULT_DURATION
from .animation import Animator
from .hierarchy import Hierarchy, TreeNode
from .models import EdgeGeometry, NodeId, Point
from .render import NodeVisual, RenderTarget, node_visual


@dataclass(frozen=True)
class KeyDiff:
    """Classification of keys between two frames."""

    enter: tuple[NodeId, ...] = ()
    update: tuple[NodeId, ...] = ()
    exit: tuple[NodeId, ...] = ()


def diff_keys(previous: Iterable[NodeId], current: Sequence[NodeId]) -> KeyDiff:
    """Split keys into enter/update/exit.

    Enter and update keep the order of ``current``; exit keeps the order of
    ``previous``.
    """
    before = list(previous)
    before_set = set(before)
    now_set = set(current)
    return KeyDiff(
        enter=tuple(k for k in current if k not in before_set),
        update=tuple(k for k in current if k in before_set),
        exit=tuple(k for k in before if k not in now_set),
    )


@dataclass
class FramePlan:
    """What one reconciliation pass did."""

    nodes: KeyDiff = field(default_factory=KeyDiff)
    edges: KeyDiff = field(default_factory=KeyDiff)


def _node_key(node_id: NodeId) -> tuple[str, NodeId]:
    return ("node", node_id)


def _edge_key(child_id: NodeId) -> tuple[str, NodeId]:
    return ("edge", child_id)


class Reconciler:
    """Keeps exactly one rendered element per node and edge identity."""

    def __init__(
        self,
        target: RenderTarget,
        animator: Animator,
        duration: float = DEFAULT_DURATION,
        visual: Callable[[TreeNode], NodeVisual] = node_visual,
    ) -> None:
        self.target = target
        self.animator = animator
        self.duration = duration
        self.visual = visual
        # insertion-ordered; includes elements whose exit is still running
        self._nodes: dict[NodeId, None] = {}
        self._edges: dict[NodeId, None] = {}

    @property
    def rendered_nodes(self) -> list[NodeId]:
        return list(self._nodes)

    @property
    def rendered_edges(self) -> list[NodeId]:
        return list(self._edges)

    def reconcile(self, hierarchy: Hierarchy) -> FramePlan:
        """Diff the hierarchy's laid-out visible set against the rendered one."""
        visible = hierarchy.visible_descendants()
        missing = [n.identity for n in visible if n.position is None]
        if missing:
            raise ValueError(f"Nodes without a layout position: {missing[:5]!r}")

        plan = FramePlan(
            nodes=diff_keys(self._nodes, [n.identity for n in visible]),
            edges=diff_keys(
                self._edges, [e.child for e in hierarchy.visible_edges()]
            ),
        )
        self._apply_nodes(hierarchy, plan.nodes)
        self._apply_edges(hierarchy, plan.edges)

        logger.debug(
            f"Reconciled nodes +{len(plan.nodes.enter)} ~{len(plan.nodes.update)} "
            f"-{len(plan.nodes.exit)}, edges +{len(plan.edges.enter)} "
            f"~{len(plan.edges.update)} -{len(plan.edges.exit)}"
        )
        return plan

    def _fold_point(self, hierarchy: Hierarchy, node_id: NodeId) -> Point:
        """Current position of the visible ancestor a hidden node folds into."""
        return hierarchy.nearest_visible_ancestor(node_id).position

    def _apply_nodes(self, hierarchy: Hierarchy, diff: KeyDiff) -> None:
        for node_id in diff.enter:
            node = hierarchy[node_id]
            visual = self.visual(node)
            entry = node.previous_position or node.position
            self.target.mount_node(node_id, entry, visual)
            self._nodes[node_id] = None
            self.animator.start(_node_key(node_id), entry, node.position, self.duration)
            self.target.animate_node(node_id, node.position, visual, self.duration)

        for node_id in diff.update:
            node = hierarchy[node_id]
            key = _node_key(node_id)
            shown = self.animator.value(key, node.previous_position or node.position)
            self.animator.start(key, shown, node.position, self.duration)
            self.target.animate_node(
                node_id, node.position, self.visual(node), self.duration
            )

        for node_id in diff.exit:
            node = hierarchy[node_id]
            key = _node_key(node_id)
            fold = self._fold_point(hierarchy, node_id)
            shown = self.animator.value(key, node.position or fold)
            # animate first: a zero-duration track unmounts inside start()
            self.target.animate_node(node_id, fold, self.visual(node), self.duration)
            self.animator.start(
                key, shown, fold, self.duration, on_complete=self._unmounter(node_id)
            )

    def _apply_edges(self, hierarchy: Hierarchy, diff: KeyDiff) -> None:
        for child_id in diff.enter:
            child = hierarchy[child_id]
            parent = hierarchy[child.parent]
            entry = child.previous_position or child.position
            collapsed = EdgeGeometry(entry, entry)
            geometry = EdgeGeometry(parent.position, child.position)
            self.target.mount_edge(child_id, collapsed)
            self._edges[child_id] = None
            self.animator.start(_edge_key(child_id), collapsed, geometry, self.duration)
            self.target.animate_edge(child_id, geometry, self.duration)

        for child_id in diff.update:
            child = hierarchy[child_id]
            parent = hierarchy[child.parent]
            key = _edge_key(child_id)
            geometry = EdgeGeometry(parent.position, child.position)
            shown = self.animator.value(key, geometry)
            self.animator.start(key, shown, geometry, self.duration)
            self.target.animate_edge(child_id, geometry, self.duration)

        for child_id in diff.exit:
            key = _edge_key(child_id)
            fold = self._fold_point(hierarchy, child_id)
            collapsed = EdgeGeometry(fold, fold)
            shown = self.animator.value(key, collapsed)
            self.target.animate_edge(child_id, collapsed, self.duration)
            self.animator.start(
                key,
                shown,
                collapsed,
                self.duration,
                on_complete=self._edge_unmounter(child_id),
            )

    def _unmounter(self, node_id: NodeId) -> Callable[[], None]:
        def unmount() -> None:
            self._nodes.pop(node_id, None)
            self.animator.discard(_node_key(node_id))
            self.target.unmount_node(node_id)

        return unmount

    def _edge_unmounter(self, child_id: NodeId) -> Callable[[], None]:
        def unmount() -> None:
            self._edges.pop(child_id, None)
            self.animator.discard(_edge_key(child_id))
            self.target.unmount_edge(child_id)

        return unmount

    def clear(self) -> None:
        """Unmount everything immediately (used when a new dataset replaces the old)."""
        for child_id in list(self._edges):
            self.animator.discard(_edge_key(child_id))
            self.target.unmount_edge(child_id)
        for node_id in list(self._nodes):
            self.animator.discard(_node_key(node_id))
            self.target.unmount_node(node_id)
        self._edges.clear()
        self._nodes.clear()
