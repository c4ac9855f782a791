"""API test fixtures — registry of fake clients + FastAPI app + httpx client.

Invariants:
    - Every test gets fresh fake implementations (no state shared between tests)
    - The app is built by create_app() exactly as production does
    - raise_app_exceptions=False so unhandled target errors surface as 500s

Design Decisions:
    - Registry fixture exposes the fakes so tests can assert on recorded calls
"""

import pytest
from httpx import ASGITransport, AsyncClient

from dynamic_api.api.client_registry import ClientRegistry
from dynamic_api.config import Settings
from dynamic_api.main import create_app
from tests import sample_clients
from tests.sample_clients import (
    FakeKulupClient, FakeOrderService, FakeThing, FakeWeatherApi,
    IKulupClient, IOrderService, IThing, IWeatherApi,
)


@pytest.fixture
def fakes():
    return {
        IKulupClient: FakeKulupClient(),
        IOrderService: FakeOrderService(),
        IWeatherApi: FakeWeatherApi(),
        IThing: FakeThing(),
    }


@pytest.fixture
def registry(fakes):
    registry = ClientRegistry()
    for interface, instance in fakes.items():
        registry.register_instance(interface, instance)
    return registry


@pytest.fixture
def settings():
    return Settings(base_route="/api", log_format="text")


@pytest.fixture
def app(registry, settings):
    return create_app(registry, sample_clients, settings=settings)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c
