"""Ordered table of tool name -> (schema, handler) bound into each server instance."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from mcp.types import CallToolResult, Tool

from moodboard.errors import NotFoundError
from moodboard.tools import ToolDef, build_tool, validate_arguments

ToolHandler = Callable[[dict[str, Any]], Awaitable[CallToolResult]]


class CapabilityRegistry:
    """Tools keyed by name, listed in registration order.

    Arguments are validated against the tool's declared schema before the
    handler runs, so handlers only ever see validated, defaulted input.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[ToolDef, Tool, ToolHandler]] = {}

    def register(self, tool: ToolDef, handler: ToolHandler) -> None:
        if tool.name in self._entries:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._entries[tool.name] = (tool, build_tool(tool), handler)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        return list(self._entries)

    def list_methods(self) -> list[Tool]:
        """Tool descriptors in registration order."""
        return [descriptor for _tool, descriptor, _handler in self._entries.values()]

    async def invoke(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        """Validate ``arguments`` for ``name`` and run its handler.

        Raises:
            NotFoundError: If no tool named ``name`` is registered.
            ValidationError: If ``arguments`` violate the tool schema. The
                handler is not called.
        """
        entry = self._entries.get(name)
        if entry is None:
            raise NotFoundError(f"Unknown tool: {name}")
        tool, _descriptor, handler = entry
        validated = validate_arguments(tool, arguments)
        return await handler(validated)


__all__ = ["CapabilityRegistry", "ToolHandler"]
