from typing import Any

import pytest

from moodboard.auth import Identity
from moodboard.cache import BoundedInstanceCache
from moodboard.dispatcher import RequestDispatcher
from moodboard.errors import ResourceNotFoundError
from moodboard.instance import InstanceFactory


class FakeClock:
    """Manually advanced clock for deterministic recency ordering."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float = 1.0) -> float:
        self.now += seconds
        return self.now


class StubGenerator:
    def __init__(self, code: str = "X") -> None:
        self.code = code
        self.calls: list[tuple[str, int]] = []

    async def __call__(self, subject: str, intensity: int) -> str:
        self.calls.append((subject, intensity))
        return self.code


WIDGET_HTML = "<html><body>moodboard</body></html>"


async def stub_load_asset(path: str) -> str:
    if path == "/moodboard.html":
        return WIDGET_HTML
    raise ResourceNotFoundError(f"Asset not found: {path}")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def generator() -> StubGenerator:
    return StubGenerator()


@pytest.fixture
def factory(generator: StubGenerator) -> InstanceFactory:
    return InstanceFactory(generate=generator, load_asset=stub_load_asset)


@pytest.fixture
def cache() -> BoundedInstanceCache[str, Any]:
    return BoundedInstanceCache(3)


@pytest.fixture
def dispatcher(cache: BoundedInstanceCache[str, Any], factory: InstanceFactory) -> RequestDispatcher:
    return RequestDispatcher(cache, factory)


@pytest.fixture
def alice() -> Identity:
    return Identity(key="alice", email="alice@example.com", auth_method="api_key")


@pytest.fixture
def bob() -> Identity:
    return Identity(key="bob", auth_method="oauth")
