"""mindmap-explorer - interactive, collapsible tree diagrams for large hierarchies."""

__version__ = "0.3.0"
__author__ = "mindmap-explorer contributors"

from .core.exceptions import MindmapExplorerError

__all__ = ["MindmapExplorerError", "__version__"]
