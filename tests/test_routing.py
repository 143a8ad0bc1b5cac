"""
Test routing service adapters

HTTP calls are stubbed by patching requests.get.
"""
from unittest.mock import MagicMock, patch

import pytest
import requests

from atm_locator.core.config import Config
from atm_locator.core.models import Coordinate, POI
from atm_locator.core.routing import (
    GebetaRoutingService,
    OSRMRoutingService,
    RoutingError,
    get_routing_service,
)

ORIGIN = Coordinate(7.06, 38.47)
DESTINATIONS = [
    POI(id="1", name="Bank-Piasa", lat=7.06, lon=38.47),
    POI(id="2", name="Bank-Atote", lat=7.05, lon=38.48),
]


def fake_response(payload=None, status_code=200, text="", json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def gebeta():
    return GebetaRoutingService("https://routing.test/", api_key="secret", timeout=3)


@pytest.fixture
def osrm():
    return OSRMRoutingService("http://osrm.test", profile="driving", timeout=3)


class TestGebeta:

    def test_request_shape(self, gebeta):
        payload = {"origin_to_destination": [{"distance": 0, "time": 0}] * 3}
        with patch("atm_locator.core.routing.requests.get",
                   return_value=fake_response(payload)) as mock_get:
            gebeta.one_to_many(ORIGIN, DESTINATIONS)

        args, kwargs = mock_get.call_args
        assert args[0] == "https://routing.test/api/route/onm"
        assert kwargs["params"] == {
            "origin": "{7.06,38.47}",
            "json": "[{7.06,38.47},{7.05,38.48}]",
            "apiKey": "secret",
        }
        assert kwargs["timeout"] == 3

    def test_skips_origin_entry(self, gebeta):
        payload = {"origin_to_destination": [
            {"distance": 0, "time": 0},
            {"distance": 0.4, "time": 55},
            {"distance": 1.9, "time": 240},
        ]}
        with patch("atm_locator.core.routing.requests.get", return_value=fake_response(payload)):
            legs = gebeta.one_to_many(ORIGIN, DESTINATIONS)

        assert [(leg.distance_km, leg.duration_s) for leg in legs] == [(0.4, 55.0), (1.9, 240.0)]

    def test_missing_time_gives_no_duration(self, gebeta):
        payload = {"origin_to_destination": [{"distance": 0}, {"distance": 0.4}, {"distance": 1.9}]}
        with patch("atm_locator.core.routing.requests.get", return_value=fake_response(payload)):
            legs = gebeta.one_to_many(ORIGIN, DESTINATIONS)

        assert [leg.duration_s for leg in legs] == [None, None]

    @pytest.mark.parametrize("payload", [
        # No origin-to-origin entry: one short
        {"origin_to_destination": [{"distance": 0.4}, {"distance": 1.9}]},
        {"origin_to_destination": "not a list"},
        {"routes": []},
        [],
        {"origin_to_destination": [{"distance": 0}, {"distance": "far"}, {"distance": 1.9}]},
        {"origin_to_destination": [{"distance": 0}, {"distance": -1}, {"distance": 1.9}]},
        {"origin_to_destination": [{"distance": 0}, {"time": 10}, {"distance": 1.9}]},
        {"origin_to_destination": [{"distance": 0}, None, {"distance": 1.9}]},
        # One entry too many
        {"origin_to_destination": [{"distance": 0}, {"distance": 0.4}, {"distance": 1.9},
                                   {"distance": 2.5}]},
    ])
    def test_malformed_payload(self, gebeta, payload):
        with patch("atm_locator.core.routing.requests.get", return_value=fake_response(payload)):
            with pytest.raises(RoutingError):
                gebeta.one_to_many(ORIGIN, DESTINATIONS)

    def test_non_success_status(self, gebeta):
        response = fake_response(status_code=401, text="invalid api key")
        with patch("atm_locator.core.routing.requests.get", return_value=response):
            with pytest.raises(RoutingError, match="401"):
                gebeta.one_to_many(ORIGIN, DESTINATIONS)

    def test_invalid_json(self, gebeta):
        response = fake_response(json_error=ValueError("Expecting value"))
        with patch("atm_locator.core.routing.requests.get", return_value=response):
            with pytest.raises(RoutingError, match="invalid JSON"):
                gebeta.one_to_many(ORIGIN, DESTINATIONS)

    @pytest.mark.parametrize("error", [
        requests.ConnectionError("refused"),
        requests.Timeout("timed out"),
    ])
    def test_transport_error(self, gebeta, error):
        with patch("atm_locator.core.routing.requests.get", side_effect=error):
            with pytest.raises(RoutingError):
                gebeta.one_to_many(ORIGIN, DESTINATIONS)

    def test_no_destinations_makes_no_request(self, gebeta):
        with patch("atm_locator.core.routing.requests.get") as mock_get:
            assert gebeta.one_to_many(ORIGIN, []) == []
        mock_get.assert_not_called()

    def test_uses_session_when_given(self):
        session = MagicMock()
        session.get.return_value = fake_response(
            {"origin_to_destination": [{"distance": 0}, {"distance": 2.0}]}
        )
        service = GebetaRoutingService("https://routing.test", "key", session=session)

        legs = service.one_to_many(ORIGIN, DESTINATIONS[:1])

        assert legs[0].distance_km == 2.0
        session.get.assert_called_once()


class TestOSRM:

    def test_request_shape_and_units(self, osrm):
        payload = {
            "code": "Ok",
            "distances": [[0, 1500.0, 700.0]],
            "durations": [[0, 120.0, 60.5]],
        }
        with patch("atm_locator.core.routing.requests.get",
                   return_value=fake_response(payload)) as mock_get:
            legs = osrm.one_to_many(ORIGIN, DESTINATIONS)

        args, kwargs = mock_get.call_args
        assert args[0] == "http://osrm.test/table/v1/driving/38.47,7.06;38.47,7.06;38.48,7.05"
        assert kwargs["params"] == {"sources": "0", "annotations": "distance,duration"}
        assert [leg.distance_km for leg in legs] == pytest.approx([1.5, 0.7])
        assert [leg.duration_s for leg in legs] == [120.0, 60.5]

    def test_without_durations(self, osrm):
        payload = {"code": "Ok", "distances": [[0, 1500.0, 700.0]]}
        with patch("atm_locator.core.routing.requests.get", return_value=fake_response(payload)):
            legs = osrm.one_to_many(ORIGIN, DESTINATIONS)

        assert [leg.duration_s for leg in legs] == [None, None]

    @pytest.mark.parametrize("payload", [
        {"code": "NoTable", "message": "no route"},
        {"code": "Ok", "distances": []},
        {"code": "Ok", "distances": [[0, 1500.0]]},
        {"code": "Ok", "distances": [[0, 1500.0, 700.0, 900.0]]},
        {"code": "Ok", "distances": [[0, None, 700.0]]},
        {"code": "Ok"},
    ])
    def test_malformed_payload(self, osrm, payload):
        with patch("atm_locator.core.routing.requests.get", return_value=fake_response(payload)):
            with pytest.raises(RoutingError):
                osrm.one_to_many(ORIGIN, DESTINATIONS)


class TestCheckConnection:

    def test_reachable(self, gebeta):
        payload = {"origin_to_destination": [{"distance": 0}, {"distance": 0}]}
        with patch("atm_locator.core.routing.requests.get", return_value=fake_response(payload)):
            assert gebeta.check_connection() is True

    def test_unreachable(self, gebeta):
        with patch("atm_locator.core.routing.requests.get",
                   side_effect=requests.ConnectionError("refused")):
            assert gebeta.check_connection() is False


class TestGetRoutingService:

    def make_config(self, **routing):
        config = Config(use_env=False)
        config.routing.update(routing)
        return config

    def test_none(self):
        assert get_routing_service(self.make_config(provider="none")) is None

    def test_gebeta_without_url_is_disabled(self):
        assert get_routing_service(self.make_config(provider="gebeta", base_url="")) is None

    def test_gebeta(self):
        service = get_routing_service(self.make_config(
            provider="gebeta", base_url="https://routing.test", api_key="k", timeout=2.5,
        ))

        assert isinstance(service, GebetaRoutingService)
        assert service.api_key == "k"
        assert service.timeout == 2.5

    def test_osrm_default_url(self):
        service = get_routing_service(self.make_config(provider="osrm", base_url=""))

        assert isinstance(service, OSRMRoutingService)
        assert service.base_url == "http://localhost:5000"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown routing provider"):
            get_routing_service(self.make_config(provider="carrier-pigeon"))
