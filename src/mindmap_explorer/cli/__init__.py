"""Command-line interface for mindmap-explorer."""
