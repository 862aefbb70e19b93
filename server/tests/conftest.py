"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

import campusguessr.main as main_module
from campusguessr.config import AppConfig
from campusguessr.core.models import LocationImage, Point
from campusguessr.core.stats import GameStats
from campusguessr.provider.base import ProviderError


def make_image(n: int, x: float = 50.0, y: float = 50.0, floor: int | None = 2) -> LocationImage:
    return LocationImage(
        image_ref=f"https://img.test/{n}.jpg",
        location=Point(x=x, y=y),
        floor=floor,
        description=f"photo {n}",
    )


class FakeProvider:
    """Scripted LocationProvider.

    Hands out ``images`` in order (cycling), raising ProviderError for every
    call whose 1-based index is in ``fail_on``. With ``gate`` set, each fetch
    waits for the event before resolving.
    """

    def __init__(self, images=None, fail_on=(), gate: asyncio.Event | None = None) -> None:
        self.images = list(images or [make_image(1)])
        self.fail_on = set(fail_on)
        self.gate = gate
        self.calls = 0

    async def fetch_next_target(self) -> LocationImage:
        self.calls += 1
        call = self.calls
        if self.gate is not None:
            await self.gate.wait()
        if call in self.fail_on:
            raise ProviderError(f"fetch {call} failed")
        return self.images[(call - 1) % len(self.images)]


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(images=[make_image(i) for i in range(1, 6)])


@pytest.fixture
def stats() -> GameStats:
    return GameStats()


@pytest.fixture(autouse=True)
def _init_server(provider, stats):
    """Initialize server singletons for every test, using the fake provider."""
    config = AppConfig()
    config.logging.level = "warning"

    registry = main_module.build_registry(config, provider, stats)

    # Patch module-level singletons
    main_module._config = config
    main_module._stats = stats
    main_module._registry = registry

    yield

    # Cleanup
    main_module._config = None
    main_module._stats = None
    main_module._registry = None


@pytest.fixture
async def client():
    from campusguessr.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
