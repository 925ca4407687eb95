from pathlib import Path

import pytest

from moodboard.errors import ResourceNotFoundError
from moodboard.resources import (
    UI_EXTENSION_ID,
    UI_MIME_TYPE,
    UI_RESOURCES,
    FileAssetLoader,
    find_ui_resource,
    has_ui_support,
)


@pytest.fixture
def assets(tmp_path: Path) -> Path:
    root = tmp_path / "widgets"
    root.mkdir()
    (root / "moodboard.html").write_text("<html>scene</html>", encoding="utf-8")
    (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")
    return root


@pytest.mark.asyncio
async def test_loads_asset(assets: Path) -> None:
    loader = FileAssetLoader(str(assets))
    assert await loader("/moodboard.html") == "<html>scene</html>"


@pytest.mark.asyncio
async def test_missing_asset(assets: Path) -> None:
    loader = FileAssetLoader(str(assets))
    with pytest.raises(ResourceNotFoundError, match="Asset not found"):
        await loader("/missing.html")


@pytest.mark.asyncio
async def test_path_traversal_is_not_found(assets: Path) -> None:
    loader = FileAssetLoader(str(assets))
    with pytest.raises(ResourceNotFoundError):
        await loader("/../secret.txt")


@pytest.mark.asyncio
async def test_directory_is_not_found(assets: Path) -> None:
    (assets / "nested").mkdir()
    loader = FileAssetLoader(str(assets))
    with pytest.raises(ResourceNotFoundError):
        await loader("/nested")


def test_find_ui_resource() -> None:
    widget = UI_RESOURCES["moodboard"]
    assert find_ui_resource(widget.uri) is widget
    assert find_ui_resource("ui://elsewhere/x.html") is None


@pytest.mark.parametrize(
    ("capabilities", "expected"),
    [
        ({"extensions": {UI_EXTENSION_ID: {"mimeTypes": [UI_MIME_TYPE]}}}, True),
        ({"extensions": {UI_EXTENSION_ID: {"mimeTypes": ["text/html"]}}}, False),
        ({"extensions": {UI_EXTENSION_ID: {}}}, False),
        ({"extensions": {}}, False),
        ({}, False),
        (None, False),
        ("ui", False),
    ],
)
def test_has_ui_support(capabilities: object, expected: bool) -> None:
    assert has_ui_support(capabilities) is expected
