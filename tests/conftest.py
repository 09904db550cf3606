"""Shared fixtures."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from ncaa_api import config
from ncaa_api.api.app import create_app
from ncaa_api.cache import InFlightCoordinator, RequestCache
from ncaa_api.services import NCAAService
from tests.fakes import FakeClient, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def service(fake_client, clock):
    """Service over the fake upstream, fixed at 2026-01-10."""
    return NCAAService(
        fake_client,
        coordinator=InFlightCoordinator(RequestCache(clock=clock)),
        today=lambda: date(2026, 1, 10),
        cutoff=2025,
    )


@pytest.fixture
def api(service, monkeypatch):
    """TestClient for an app wired to the fake service, with no API key set."""
    monkeypatch.setattr(config, "NCAA_HEADER_KEY", None)
    app = create_app(service=service)
    with TestClient(app) as client:
        yield client
