"""
Unit tests for the HTTP provider clients (traffic.providers), against a stubbed session.
"""

from datetime import datetime, timezone

import pytest
import requests

from traffic.conf import TrafficConfig
from traffic.exceptions import ProviderError
from traffic.geo import Coordinate
from traffic.providers import (
    DISTANCE_MATRIX_URL,
    GEOCODE_URL,
    DistanceMatrixClient,
    GeocodingClient,
    OnWaterClient,
)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def get(self, url, params=None, timeout=None):
        self.requests.append({"url": url, "params": params, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


CONFIG = TrafficConfig(maps_api_key="maps-key", onwater_api_key="water-key", request_timeout=7.5)


def client(cls, response):
    session = FakeSession(response)
    return cls(CONFIG, session_factory=lambda: session), session


class TestDistanceMatrixClient:
    def test_request_parameters(self):
        payload = {"status": "OK", "origin_addresses": [], "destination_addresses": [], "rows": []}
        c, session = client(DistanceMatrixClient, FakeResponse(payload))
        departure = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

        assert c.matrix(["53.35,-6.26", "53.44,-6.26"], ["53.35,-6.26", "53.44,-6.26"], departure) == payload

        sent = session.requests[0]
        assert sent["url"] == DISTANCE_MATRIX_URL
        assert sent["timeout"] == 7.5
        assert sent["params"]["origins"] == "53.35,-6.26|53.44,-6.26"
        assert sent["params"]["destinations"] == "53.35,-6.26|53.44,-6.26"
        assert sent["params"]["departure_time"] == "1709280000"
        assert sent["params"]["traffic_model"] == "best_guess"
        assert sent["params"]["mode"] == "driving"
        assert sent["params"]["units"] == "metric"
        assert sent["params"]["key"] == "maps-key"

    def test_status_not_ok(self):
        c, _ = client(DistanceMatrixClient, FakeResponse({"status": "REQUEST_DENIED", "error_message": "bad key"}))
        with pytest.raises(ProviderError) as exc:
            c.matrix(["1,1"], ["1,1"], datetime.now(timezone.utc))
        assert exc.value.status == "REQUEST_DENIED"
        assert "bad key" in str(exc.value)

    def test_http_error(self):
        c, _ = client(DistanceMatrixClient, FakeResponse({}, status_code=500))
        with pytest.raises(ProviderError):
            c.matrix(["1,1"], ["1,1"], datetime.now(timezone.utc))

    def test_timeout(self):
        c, _ = client(DistanceMatrixClient, requests.Timeout("read timed out"))
        with pytest.raises(ProviderError):
            c.matrix(["1,1"], ["1,1"], datetime.now(timezone.utc))

    def test_invalid_json(self):
        c, _ = client(DistanceMatrixClient, FakeResponse(ValueError("Expecting value")))
        with pytest.raises(ProviderError):
            c.matrix(["1,1"], ["1,1"], datetime.now(timezone.utc))


class TestOnWaterClient:
    def test_water(self):
        c, session = client(OnWaterClient, FakeResponse({"lat": 53.3, "lon": -5.9, "water": True}))
        assert c.is_water(Coordinate(53.3, -5.9)) is True
        assert session.requests[0]["url"].endswith("/results/53.3,-5.9")
        assert session.requests[0]["params"] == {"access_token": "water-key"}

    def test_land(self):
        c, _ = client(OnWaterClient, FakeResponse({"water": False}))
        assert c.is_water(Coordinate(53.35, -6.26)) is False

    def test_error_payload(self):
        c, _ = client(OnWaterClient, FakeResponse({"error": "Rate limit exceeded"}))
        with pytest.raises(ProviderError):
            c.is_water(Coordinate(53.35, -6.26))

    def test_missing_water_field(self):
        c, _ = client(OnWaterClient, FakeResponse({"lat": 1}))
        with pytest.raises(ProviderError):
            c.is_water(Coordinate(1, 1))


class TestGeocodingClient:
    def test_country_component(self):
        payload = {
            "status": "OK",
            "results": [
                {
                    "address_components": [
                        {"long_name": "Dublin", "types": ["locality", "political"]},
                        {"long_name": "Ireland", "short_name": "IE", "types": ["country", "political"]},
                    ]
                }
            ],
        }
        c, session = client(GeocodingClient, FakeResponse(payload))
        assert c.country(Coordinate(53.3498, -6.2603)) == "Ireland"
        assert session.requests[0]["url"] == GEOCODE_URL
        assert session.requests[0]["params"]["latlng"] == "53.3498,-6.2603"

    def test_no_country_component(self):
        payload = {"status": "OK", "results": [{"address_components": [{"long_name": "Sea", "types": ["natural_feature"]}]}]}
        c, _ = client(GeocodingClient, FakeResponse(payload))
        assert c.country(Coordinate(0, 0)) is None

    def test_zero_results(self):
        c, _ = client(GeocodingClient, FakeResponse({"status": "ZERO_RESULTS", "results": []}))
        with pytest.raises(ProviderError):
            c.country(Coordinate(0, 0))
