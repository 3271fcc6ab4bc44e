"""
Shared pytest fixtures for adsb2dd tests.

Provides a fresh registry, a scriptable fake tar1090 upstream, an HTTP
client wired to both, a controllable clock, and sample aircraft.json data.
"""
import asyncio
import os
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport

# Set test environment variables before importing app
os.environ.setdefault('MAX_CONFIGS', '3')
os.environ.setdefault('INACTIVITY_TIMEOUT', '600')
os.environ.setdefault('UPDATE_INTERVAL', '1.0')
os.environ.setdefault('STATIC_DIR', '/nonexistent-adsb2dd-static')

from adsb2dd.main import app
from adsb2dd.core.exceptions import TransientFetchError
from adsb2dd.models import UpstreamSnapshot
from adsb2dd.routers.dependencies import get_registry, get_scheduler, get_upstream
from adsb2dd.services.registry import ConfigRegistry
from adsb2dd.services.scheduler import UpdateScheduler
from adsb2dd.services.upstream import parse_snapshot

SERVER = "http://tar1090.test"
API_URL = SERVER + "/data/aircraft.json"


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, now: float = 1703001234.567):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeUpstream:
    """
    Scriptable stand-in for UpstreamClient.

    responses maps URL -> snapshot dict or exception; delays maps URL ->
    seconds to sleep before answering. Unknown URLs fail as transient.
    """

    def __init__(self):
        self.responses: dict[str, object] = {}
        self.delays: dict[str, float] = {}
        self.valid_servers: set[str] = set()
        self.probe_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self.probe_gate: asyncio.Event | None = None

    async def probe(self, url: str) -> bool:
        self.probe_calls.append(url)
        if self.probe_gate is not None:
            await self.probe_gate.wait()
        return url in self.valid_servers

    async def fetch_snapshot(self, url: str) -> UpstreamSnapshot:
        self.fetch_calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)
        response = self.responses.get(url)
        if response is None:
            raise TransientFetchError(url, "no response scripted")
        if isinstance(response, Exception):
            raise response
        return parse_snapshot(url, response)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry(clock):
    return ConfigRegistry(max_configs=3, clock=clock)


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    fake.valid_servers.add(API_URL)
    return fake


@pytest.fixture
def scheduler(registry, upstream, clock):
    return UpdateScheduler(
        registry,
        upstream,
        interval=0.01,
        inactivity_timeout=600,
        tick_deadline=0.5,
        clock=clock,
    )


@pytest_asyncio.fixture
async def client(registry, upstream, scheduler) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with registry/upstream/scheduler overrides."""
    app.dependency_overrides[get_registry] = lambda: registry
    app.dependency_overrides[get_upstream] = lambda: upstream
    app.dependency_overrides[get_scheduler] = lambda: scheduler

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Sample Aircraft Data Fixtures
# =============================================================================

@pytest.fixture
def sample_aircraft_data():
    """Sample aircraft.json response from tar1090."""
    return {
        "now": 1703001234.567,
        "messages": 123456,
        "aircraft": [
            {
                "hex": "a12345",
                "flight": "UAL123  ",
                "lat": 47.95,
                "lon": -121.95,
                "alt_baro": 35000,
                "alt_geom": 35100,
                "gs": 450,
                "track": 180,
                "baro_rate": -500,
                "squawk": "1200",
                "category": "A3",
                "t": "B738",
            },
            {
                "hex": "ae1234",
                "flight": "RCH001  ",
                "lat": 47.90,
                "lon": -121.90,
                "alt_baro": 25000,
                "gs": 380,
                "track": 90,
                "geom_rate": 1500,
                "category": "A5",
                "t": "C17",
            },
            {
                # No position: omitted from output
                "hex": "b99999",
                "alt_baro": 8000,
                "gs": 200,
                "track": 10,
            },
            {
                # No velocity: omitted from output
                "hex": "c00001",
                "lat": 47.94,
                "lon": -121.97,
                "alt_baro": "ground",
            },
        ]
    }


@pytest.fixture
def rx_tx():
    """Receiver and transmitter query strings near the sample aircraft."""
    return "47.9377,-121.9687,100", "47.6205,-122.3493,250"
