"""Shared test fixtures."""

import random
from collections.abc import Callable
from datetime import datetime, timezone

import httpx
import pytest

from pvdash.api.client import DashboardClient
from pvdash.config.settings import Settings
from pvdash.mock.catalog import default_catalog
from pvdash.mock.generator import LocalGenerator
from pvdash.provider import DataProvider

FIXED_NOW = datetime(2024, 6, 15, 13, 7, 30, tzinfo=timezone.utc)

Handler = Callable[[httpx.Request], httpx.Response]


def offline_handler(request: httpx.Request) -> httpx.Response:
    """Transport handler simulating an unreachable backend."""
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings that never read a .env file."""
    return Settings(
        _env_file=None,
        api_base_url="http://backend.test",
        log_level="DEBUG",
    )


@pytest.fixture
def generator() -> LocalGenerator:
    """Seeded generator anchored at a fixed time."""
    return LocalGenerator(
        catalog=default_catalog(FIXED_NOW),
        rng=random.Random(1234),
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def make_provider(test_settings, generator) -> Callable[..., DataProvider]:
    """Build a provider whose backend is answered by a handler function."""

    def _make(handler: Handler = offline_handler, settings: Settings | None = None) -> DataProvider:
        settings = settings or test_settings
        client = DashboardClient(settings, transport=httpx.MockTransport(handler))
        return DataProvider(settings, client=client, generator=generator)

    return _make


@pytest.fixture
def offline_provider(make_provider) -> DataProvider:
    """Provider whose backend is unreachable."""
    return make_provider(offline_handler)


@pytest.fixture
def installation_payload() -> dict:
    """Installation as sent by the backend."""
    return {
        "id": "inst-101",
        "name": "Rooftop East",
        "clientId": "client-101",
        "clientName": "Sunny Homes",
        "installedPower": 12.5,
        "location": "Poznan, Poland",
        "status": "active",
        "lastUpdate": "2024-06-15T12:00:00Z",
    }


@pytest.fixture
def detail_payload(installation_payload) -> dict:
    """Installation detail as sent by the backend."""
    return {
        "installation": installation_payload,
        "currentPower": 8.4,
        "autokonsumpcja": 42.0,
        "energyImported": 3.5,
        "energyExported": 17.25,
        "powerHistory": [
            {"timestamp": "2024-06-15T11:55:00Z", "power": 8.1, "irradiation": 640.0},
            {"timestamp": "2024-06-15T12:00:00Z", "power": 8.4},
        ],
        "weatherData": [],
    }


@pytest.fixture
def report_payload() -> dict:
    """Monthly report as sent by the backend."""
    return {
        "installationId": "inst-101",
        "month": "06",
        "year": 2024,
        "totalProduction": 1520.5,
        "totalConsumption": 980.0,
        "totalExport": 700.5,
        "totalImport": 160.0,
        "efficiency": 88.2,
    }
