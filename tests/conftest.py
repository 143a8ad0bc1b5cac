"""
Test Configuration and Fixtures

Shared catalogs and routing-service stubs for the ATM Locator test suite.
"""
import threading

import pytest

from atm_locator.core.models import POI, RouteLeg
from atm_locator.core.routing import RoutingError

ROUTING_ENV_VARS = [
    "ATM_LOCATOR_ROUTING_PROVIDER",
    "GEBETA_API_KEY",
    "GEBETA_BASE_URL",
    "OSRM_URL",
]

HAWASSA_ATMS = [
    ("1", "CBE-Piasa", 7.0621, 38.4764),
    ("2", "CBE-Atote", 7.0489, 38.4901),
    ("3", "Awash-Arab Sefer", 7.0552, 38.4815),
    ("4", "Dashen-Tabor", 7.0435, 38.4702),
    ("5", "Abyssinia-Menaharia", 7.0668, 38.4783),
    ("6", "CBE-Mobil", 7.0590, 38.4740),
    ("7", "Awash-Alamura", 7.0312, 38.4850),
    ("8", "Dashen-Haik Dar", 7.0701, 38.4621),
    ("9", "Abyssinia-Piassa", 7.0618, 38.4770),
    ("10", "CBE-Referal", 7.0540, 38.4920),
    ("11", "Wegagen-Addis Ketema", 7.0490, 38.4650),
    ("12", "Zemen-Tesso", 7.0400, 38.4950),
]


@pytest.fixture(autouse=True)
def clean_routing_env(monkeypatch):
    """Keep routing settings from the developer's environment out of tests"""
    for key in ROUTING_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def scenario_catalog():
    """Two-ATM catalog used by the reference scenarios"""
    return (
        POI(id="1", name="Bank-Piasa", lat=7.06, lon=38.47),
        POI(id="2", name="Bank-Atote", lat=7.05, lon=38.48),
    )


@pytest.fixture
def hawassa_catalog():
    """Twelve ATMs around Hawassa"""
    return tuple(POI(id=i, name=n, lat=lat, lon=lon) for i, n, lat, lon in HAWASSA_ATMS)


@pytest.fixture
def write_catalog(tmp_path):
    """Write CSV text to a catalog file and return its path"""
    def _write(text, name="atms.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def hawassa_csv(write_catalog):
    """Hawassa catalog as a CSV file"""
    lines = ["id,name,lat,lon"]
    lines += [f"{i},{n},{lat},{lon}" for i, n, lat, lon in HAWASSA_ATMS]
    return write_catalog("\n".join(lines) + "\n")


class StubRoutingService:
    """
    In-memory routing service.

    ``road_km`` maps POI id -> road distance; POIs not listed get their id
    as a float so results are predictable. Records every call. With
    ``block`` set, calls wait on it; ``block_origins`` limits that to calls
    from the listed origins.
    """

    name = "stub"
    base_url = "http://stub"

    def __init__(self, road_km=None, error=None, legs=None, block=None, block_origins=None):
        self.road_km = road_km or {}
        self.error = error
        self.legs = legs
        self.block = block
        self.block_origins = block_origins
        self.calls = []

    def one_to_many(self, origin, destinations):
        self.calls.append((origin, list(destinations)))
        if self.block is not None and (self.block_origins is None or origin in self.block_origins):
            self.block.wait(timeout=5)
        if self.error is not None:
            raise self.error
        if self.legs is not None:
            return list(self.legs)
        return [
            RouteLeg(
                distance_km=self.road_km.get(d.id, float(d.id)),
                duration_s=60.0 * self.road_km.get(d.id, float(d.id)),
            )
            for d in destinations
        ]


@pytest.fixture
def stub_routing():
    """Factory for StubRoutingService"""
    return StubRoutingService


@pytest.fixture
def failing_routing():
    """Routing service that is always unreachable"""
    return StubRoutingService(error=RoutingError("connection refused"))


@pytest.fixture
def release_event():
    """Event that unblocks a blocking stub; always set on teardown"""
    event = threading.Event()
    yield event
    event.set()
