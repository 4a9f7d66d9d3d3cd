"""In-memory hierarchy with per-node collapse state.

Nodes live in an arena keyed by identity. A node's children are owned as an
ordered tuple of identities inside an explicit ``Expanded``/``Collapsed``
state, so a subtree can never be visible and hidden at the same time. The
parent link is a plain identity handle used only for upward traversal.

Traversal order is pre-order (parent before children, siblings in input
order) everywhere; the layout engine relies on it for tie-breaking.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from loguru import logger

from .exceptions import RootCollapseError, UnknownNodeError
from .models import NodeId, Point


@dataclass(frozen=True)
class Expanded:
    """Children are visible."""

    children: tuple[NodeId, ...] = ()


@dataclass(frozen=True)
class Collapsed:
    """Children are hidden as a single unit."""

    children: tuple[NodeId, ...] = ()


ChildState = Expanded | Collapsed


@dataclass(frozen=True)
class Edge:
    """Parent→child link, identified by its child."""

    parent: NodeId
    child: NodeId

    @property
    def key(self) -> NodeId:
        return self.child


@dataclass
class TreeNode:
    """A single node of the hierarchy."""

    identity: NodeId
    label: str
    annotation: str | None = None
    link: str | None = None
    parent: NodeId | None = None
    depth: int = 0
    state: ChildState = field(default_factory=Expanded)
    branch_color: str | None = None
    position: Point | None = None
    previous_position: Point | None = None

    @property
    def children(self) -> tuple[NodeId, ...]:
        """All children regardless of collapse state."""
        return self.state.children

    @property
    def visible_children(self) -> tuple[NodeId, ...]:
        return self.state.children if isinstance(self.state, Expanded) else ()

    @property
    def hidden_children(self) -> tuple[NodeId, ...]:
        return self.state.children if isinstance(self.state, Collapsed) else ()

    @property
    def is_leaf(self) -> bool:
        return not self.state.children

    @property
    def is_collapsed(self) -> bool:
        """True when the node holds hidden children."""
        return bool(self.hidden_children)

    @property
    def has_annotation(self) -> bool:
        return bool(self.annotation and self.annotation.strip())

    @property
    def has_link(self) -> bool:
        return bool(self.link and self.link.strip())


class Hierarchy:
    """Arena of ``TreeNode`` objects addressed by identity."""

    def __init__(self, nodes: dict[NodeId, TreeNode], root_id: NodeId) -> None:
        if root_id not in nodes:
            raise UnknownNodeError(f"Root {root_id!r} is not part of the hierarchy")
        self._nodes = nodes
        self.root_id = root_id
        # identities positioned by the most recent layout pass
        self.laid_out: set[NodeId] = set()

    # ── lookup ──────────────────────────────────────────────────────────

    def __getitem__(self, node_id: NodeId) -> TreeNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise UnknownNodeError(
                f"Unknown node {node_id!r}", context={"node_id": node_id}
            ) from None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self._nodes.values())

    @property
    def root(self) -> TreeNode:
        return self._nodes[self.root_id]

    def ancestors(self, node_id: NodeId) -> Iterator[TreeNode]:
        """Yield ancestors from the parent up to the root."""
        parent_id = self[node_id].parent
        while parent_id is not None:
            parent = self._nodes[parent_id]
            yield parent
            parent_id = parent.parent

    def path_to(self, node_id: NodeId) -> list[TreeNode]:
        """Nodes from the root down to ``node_id`` inclusive."""
        path = [self[node_id], *self.ancestors(node_id)]
        path.reverse()
        return path

    def is_visible(self, node_id: NodeId) -> bool:
        """True when every ancestor of the node is expanded."""
        return all(isinstance(a.state, Expanded) for a in self.ancestors(node_id))

    def nearest_visible_ancestor(self, node_id: NodeId) -> TreeNode:
        """Closest node on the root path (the node itself included) that is visible."""
        path = self.path_to(node_id)
        visible = path[0]
        for node in path[1:]:
            if not isinstance(self._nodes[node.parent].state, Expanded):
                break
            visible = node
        return visible

    # ── traversal ───────────────────────────────────────────────────────

    def visible_descendants(self, node_id: NodeId | None = None) -> list[TreeNode]:
        """Nodes reachable through visible links, in pre-order."""
        start = self.root_id if node_id is None else node_id
        result: list[TreeNode] = []
        stack = [self[start]]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(self._nodes[c] for c in reversed(node.visible_children))
        return result

    def descendants(self, node_id: NodeId | None = None) -> list[TreeNode]:
        """All nodes of the subtree, visible or hidden, in pre-order."""
        start = self.root_id if node_id is None else node_id
        result: list[TreeNode] = []
        stack = [self[start]]
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(self._nodes[c] for c in reversed(node.children))
        return result

    def visible_edges(self) -> list[Edge]:
        """Edges between visible nodes, ordered like their child nodes."""
        return [
            Edge(parent=node.parent, child=node.identity)
            for node in self.visible_descendants()
            if node.parent is not None
        ]

    # ── mutation ────────────────────────────────────────────────────────

    def toggle(self, node_id: NodeId) -> bool:
        """Swap a node between expanded and collapsed.

        Only the node's own state changes; its children keep whatever state
        they had. Returns False for leaves, which have nothing to toggle.

        Raises:
            RootCollapseError: If the toggle would collapse the root
        """
        node = self[node_id]
        if node.is_leaf:
            return False
        if isinstance(node.state, Expanded):
            if node_id == self.root_id:
                raise RootCollapseError(
                    "The root node cannot be collapsed", context={"node_id": node_id}
                )
            node.state = Collapsed(node.state.children)
        else:
            node.state = Expanded(node.state.children)
        logger.debug(
            f"Toggled {node_id!r} -> {'collapsed' if node.is_collapsed else 'expanded'}"
        )
        return True

    def collapse_subtree(self, node_id: NodeId) -> None:
        """Collapse the node and every descendant, visible or hidden.

        The root keeps its children visible; its descendants still collapse.
        """
        for node in self.descendants(node_id):
            if node.is_leaf or node.identity == self.root_id:
                continue
            node.state = Collapsed(node.children)

    def expand_subtree(self, node_id: NodeId) -> None:
        """Expand the node and every descendant."""
        for node in self.descendants(node_id):
            node.state = Expanded(node.children)

    def collapse_all(self) -> None:
        """Hide everything below the first generation."""
        for child_id in self.root.children:
            self.collapse_subtree(child_id)
        self.root.state = Expanded(self.root.children)

    def expand_all(self) -> None:
        self.expand_subtree(self.root_id)

    def assign_branch_color(self, node_id: NodeId, color: str) -> None:
        """Set ``color`` on the node and all of its descendants."""
        for node in self.descendants(node_id):
            node.branch_color = color
