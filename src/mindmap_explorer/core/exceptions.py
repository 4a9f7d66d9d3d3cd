"""Typed exception hierarchy for mindmap-explorer.

Hierarchy
---------
MindmapExplorerError (base)
├── DatasetLoadError          – dataset could not be fetched or decoded
├── MalformedHierarchyError   – input is not a finite rooted tree
│   ├── CyclicHierarchyError
│   └── DuplicateIdentityError
├── HierarchyError            – invalid operation on a loaded hierarchy
│   ├── UnknownNodeError
│   ├── RootCollapseError
│   └── HiddenNodeError
├── ExplorerNotReadyError     – interaction before a dataset was loaded
└── ConfigError               – configuration / validation errors

An interrupted animation is not an error: a new transition replaces the one
in flight.
"""

from typing import Any


class MindmapExplorerError(Exception):
    """Base exception for mindmap-explorer."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


# ── Loading layer ───────────────────────────────────────────────────────


class DatasetLoadError(MindmapExplorerError):
    """Dataset fetch or decode failed.

    ``context["url"]`` holds the dataset location that was attempted.
    """

    pass


class MalformedHierarchyError(MindmapExplorerError):
    """Input data does not describe a finite rooted tree."""

    pass


class CyclicHierarchyError(MalformedHierarchyError):
    """A node is reachable from itself (or shared between two parents)."""

    pass


class DuplicateIdentityError(MalformedHierarchyError):
    """Two records carry the same identity hint."""

    pass


# ── Hierarchy layer ─────────────────────────────────────────────────────


class HierarchyError(MindmapExplorerError):
    """Invalid operation on a loaded hierarchy."""

    pass


class UnknownNodeError(HierarchyError, KeyError):
    """No node with the requested identity exists."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0]) if self.args else ""


class RootCollapseError(HierarchyError):
    """The root node can never be collapsed."""

    pass


class HiddenNodeError(HierarchyError):
    """The node sits inside a collapsed subtree and cannot be clicked."""

    pass


# ── Interaction layer ───────────────────────────────────────────────────


class ExplorerNotReadyError(MindmapExplorerError):
    """Interaction requested before a dataset was loaded."""

    pass


# ── Configuration layer ─────────────────────────────────────────────────


class ConfigError(MindmapExplorerError):
    """Configuration / validation errors."""

    pass
