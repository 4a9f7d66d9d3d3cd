"""Configuration for mindmap-explorer."""

from .settings import ExplorerSettings, load_settings

__all__ = ["ExplorerSettings", "load_settings"]
