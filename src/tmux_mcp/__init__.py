"""MCP server for driving tmux sessions, windows, and panes."""

__version__ = "0.1.0"

__all__ = ["__version__"]
