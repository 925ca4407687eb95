"""MCP server turning emotions into interactive Three.js scenes."""

from __future__ import annotations

__version__ = "1.0.0"

from .server import build_dispatcher, create_app, main

__all__ = ["__version__", "build_dispatcher", "create_app", "main"]
