"""Per-identity protocol server instances and the factory that builds them.

Every instance exposes the same tools, resources, and prompts. The identity is
bound only into handler closures, where it is used for log attribution.
Each instance also owns an ``mcp.server.Server`` wired to the same handlers so
it can be served over the MCP stdio transport unchanged.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.shared.exceptions import McpError
from mcp.types import (
    CallToolResult,
    ErrorData,
    GetPromptResult,
    Prompt,
    ReadResourceResult,
    Resource,
    TextContent,
    TextResourceContents,
    Tool,
)

from moodboard import __version__
from moodboard.auth import Identity
from moodboard.descriptions import SERVER_INSTRUCTIONS
from moodboard.errors import MoodboardError, ResourceNotFoundError
from moodboard.generator import GenerateFn
from moodboard.primitives import primitives_documentation
from moodboard.prompts import PROMPTS, render_prompt
from moodboard.registry import CapabilityRegistry, ToolHandler
from moodboard.resources import UI_RESOURCES, UIResource, find_ui_resource
from moodboard.tools import GENERATE_MOOD_SCENE_TOOL, LEARN_MOOD_PRIMITIVES_TOOL, TOOL_DEFS

logger = logging.getLogger("moodboard.instance")

SERVER_NAME = "3D Abstract Moodboard"

LoadAssetFn = Callable[[str], Awaitable[str]]


def _error_result(message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def _scene_handler(identity: Identity, generate: GenerateFn) -> ToolHandler:
    async def handle(arguments: dict[str, Any]) -> CallToolResult:
        subject = arguments["subject"]
        start = time.monotonic()
        try:
            code = await generate(subject, arguments["intensity"])
        except Exception as exc:
            logger.error(
                "generate_mood_scene failed for %s: %s",
                identity.key,
                exc,
                extra={"event": "tool_failed", "tool": "generate_mood_scene", **identity.log_fields()},
            )
            return _error_result(f"Error generating mood scene: {exc}")

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "generate_mood_scene completed for %s in %dms",
            identity.key,
            duration_ms,
            extra={
                "event": "tool_completed",
                "tool": "generate_mood_scene",
                "duration_ms": duration_ms,
                **identity.log_fields(),
            },
        )
        result = {"code": code, "subject": subject, "size": arguments["size"]}
        return CallToolResult(
            content=[TextContent(type="text", text=json.dumps(result, indent=2))],
            structuredContent=result,
        )

    return handle


def _primitives_handler(identity: Identity) -> ToolHandler:
    async def handle(arguments: dict[str, Any]) -> CallToolResult:
        text = primitives_documentation(arguments["topic"])
        logger.info(
            "learn_mood_primitives completed for %s",
            identity.key,
            extra={"event": "tool_completed", "tool": "learn_mood_primitives", **identity.log_fields()},
        )
        return CallToolResult(
            content=[TextContent(type="text", text=text)],
            structuredContent={"text": text},
        )

    return handle


class ProtocolServerInstance:
    """Capability surface bound to one identity.

    Created by ``InstanceFactory`` and never altered afterwards. Handlers keep
    no per-call state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        identity: Identity,
        registry: CapabilityRegistry,
        resources: Iterable[UIResource],
        prompts: Iterable[Prompt],
        load_asset: LoadAssetFn,
    ) -> None:
        self.identity = identity
        self.registry = registry
        self.resources = tuple(resources)
        self.prompts = tuple(prompts)
        self._load_asset = load_asset
        self.server = self._bind_server()

    def list_tools(self) -> list[Tool]:
        return self.registry.list_methods()

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        return await self.registry.invoke(name, arguments)

    def list_resources(self) -> list[Resource]:
        return [
            Resource(
                uri=resource.uri,
                name=resource.name,
                description=resource.description,
                mimeType=resource.mime_type,
                _meta=resource.meta,
            )
            for resource in self.resources
        ]

    async def read_resource_text(self, uri: str) -> tuple[UIResource, str]:
        """Load the content behind ``uri``.

        Raises:
            ResourceNotFoundError: Unknown URI, or its asset is missing.
        """
        resource = find_ui_resource(uri)
        if resource is None or resource not in self.resources:
            raise ResourceNotFoundError(f"Unknown resource: {uri}")
        return resource, await self._load_asset(resource.asset_path)

    async def read_resource(self, uri: str) -> ReadResourceResult:
        resource, text = await self.read_resource_text(uri)
        return ReadResourceResult(
            contents=[
                TextResourceContents(
                    uri=resource.uri,
                    mimeType=resource.mime_type,
                    text=text,
                    _meta=resource.meta,
                )
            ]
        )

    def list_prompts(self) -> list[Prompt]:
        return list(self.prompts)

    def get_prompt(self, name: str, arguments: dict[str, str] | None) -> GetPromptResult:
        return render_prompt(name, arguments)

    def _bind_server(self) -> Server:
        server: Server = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

        @server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        @server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
            try:
                return await self.call_tool(name, arguments)
            except MoodboardError as exc:
                return _error_result(str(exc))

        @server.list_resources()
        async def list_resources() -> list[Resource]:
            return self.list_resources()

        @server.read_resource()
        async def read_resource(uri: Any) -> list[ReadResourceContents]:
            try:
                resource, text = await self.read_resource_text(str(uri))
            except MoodboardError as exc:
                raise McpError(ErrorData(code=exc.code, message=str(exc))) from exc
            return [ReadResourceContents(content=text, mime_type=resource.mime_type)]

        @server.list_prompts()
        async def list_prompts() -> list[Prompt]:
            return self.list_prompts()

        @server.get_prompt()
        async def get_prompt(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
            try:
                return self.get_prompt(name, arguments)
            except MoodboardError as exc:
                raise McpError(ErrorData(code=exc.code, message=str(exc))) from exc

        return server


class InstanceFactory:
    """Builds ``ProtocolServerInstance`` objects with a fixed capability surface.

    Args:
        generate: Scene-code generation collaborator.
        load_asset: Static asset loader used by the UI resource.
    """

    def __init__(self, generate: GenerateFn, load_asset: LoadAssetFn) -> None:
        self.generate = generate
        self.load_asset = load_asset

    def create(self, identity: Identity) -> ProtocolServerInstance:
        handlers: dict[str, ToolHandler] = {
            GENERATE_MOOD_SCENE_TOOL.name: _scene_handler(identity, self.generate),
            LEARN_MOOD_PRIMITIVES_TOOL.name: _primitives_handler(identity),
        }
        registry = CapabilityRegistry()
        for tool in TOOL_DEFS:
            registry.register(tool, handlers[tool.name])
        instance = ProtocolServerInstance(
            identity,
            registry,
            resources=UI_RESOURCES.values(),
            prompts=PROMPTS,
            load_asset=self.load_asset,
        )
        logger.info(
            "Created server instance for %s",
            identity.key,
            extra={"event": "instance_created", **identity.log_fields()},
        )
        return instance


__all__ = ["InstanceFactory", "LoadAssetFn", "ProtocolServerInstance", "SERVER_NAME"]
