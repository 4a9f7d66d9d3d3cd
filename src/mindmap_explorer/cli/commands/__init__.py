"""CLI commands for mindmap-explorer."""
