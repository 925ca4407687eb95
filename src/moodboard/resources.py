"""UI resource definitions and the static asset loader behind them."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any

from moodboard.errors import ResourceNotFoundError

logger = logging.getLogger("moodboard.resources")

UI_MIME_TYPE = "text/html;profile=mcp-app"
RESOURCE_URI_META_KEY = "ui/resourceUri"
UI_EXTENSION_ID = "io.modelcontextprotocol/ui"


@dataclass(frozen=True)
class UIResource:
    """A widget resource linked to tools through ``_meta["ui/resourceUri"]``."""

    uri: str
    name: str
    description: str
    asset_path: str
    mime_type: str = UI_MIME_TYPE
    meta: dict[str, Any] = field(default_factory=dict)


UI_RESOURCES: dict[str, UIResource] = {
    "moodboard": UIResource(
        uri="ui://3d-moodboard/moodboard.html",
        name="moodboard_widget",
        description=(
            "3D Abstract Moodboard - Interactive Three.js scene viewer with streaming code "
            "preview. Renders abstract art installations from emotional prompts with "
            "OrbitControls for exploration."
        ),
        asset_path="/moodboard.html",
        meta={
            "ui": {
                # Widget gets all data over MCP and ships its scripts inlined.
                "csp": {"connectDomains": [], "resourceDomains": []},
                "prefersBorder": False,
            }
        },
    ),
}


def find_ui_resource(uri: str) -> UIResource | None:
    for resource in UI_RESOURCES.values():
        if resource.uri == uri:
            return resource
    return None


def has_ui_support(client_capabilities: Any) -> bool:
    """Return True if the client advertises the MCP Apps UI extension for our MIME type."""
    if not isinstance(client_capabilities, dict):
        return False
    extensions = client_capabilities.get("extensions")
    if not isinstance(extensions, dict):
        return False
    ui_extension = extensions.get(UI_EXTENSION_ID)
    if not isinstance(ui_extension, dict):
        return False
    mime_types = ui_extension.get("mimeTypes")
    if not isinstance(mime_types, list):
        return False
    return UI_MIME_TYPE in mime_types


class FileAssetLoader:
    """Loads built widget HTML from a directory on disk.

    Paths are resolved relative to ``root``; anything that resolves outside of
    it is reported as not found.
    """

    def __init__(self, root: str) -> None:
        self.root = os.path.realpath(root)

    def _resolve(self, path: str) -> str:
        resolved = os.path.realpath(os.path.join(self.root, path.lstrip("/")))
        if os.path.commonpath([resolved, self.root]) != self.root:
            raise ResourceNotFoundError(f"Asset not found: {path}")
        return resolved

    def _read(self, path: str) -> str:
        resolved = self._resolve(path)
        try:
            with open(resolved, encoding="utf-8") as handle:
                return handle.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise ResourceNotFoundError(f"Asset not found: {path}") from exc

    async def __call__(self, path: str) -> str:
        return await asyncio.to_thread(self._read, path)


__all__ = [
    "FileAssetLoader",
    "RESOURCE_URI_META_KEY",
    "UIResource",
    "UI_EXTENSION_ID",
    "UI_MIME_TYPE",
    "UI_RESOURCES",
    "find_ui_resource",
    "has_ui_support",
]
