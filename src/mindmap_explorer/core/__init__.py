"""Core engine for mindmap-explorer: hierarchy, layout, reconciliation, viewport."""

from .exceptions import (
    ConfigError,
    CyclicHierarchyError,
    DatasetLoadError,
    DuplicateIdentityError,
    ExplorerNotReadyError,
    HierarchyError,
    MalformedHierarchyError,
    MindmapExplorerError,
    RootCollapseError,
    UnknownNodeError,
)
from .hierarchy import Collapsed, Edge, Expanded, Hierarchy, TreeNode
from .models import EdgeGeometry, NodeId, NodeRecord, Point

__all__ = [
    # Exceptions
    "ConfigError",
    "CyclicHierarchyError",
    "DatasetLoadError",
    "DuplicateIdentityError",
    "ExplorerNotReadyError",
    "HierarchyError",
    "MalformedHierarchyError",
    "MindmapExplorerError",
    "RootCollapseError",
    "UnknownNodeError",
    # Hierarchy model
    "Collapsed",
    "Edge",
    "Expanded",
    "Hierarchy",
    "TreeNode",
    # Geometry / records
    "EdgeGeometry",
    "NodeId",
    "NodeRecord",
    "Point",
]
