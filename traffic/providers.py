# traffic/providers.py
"""
HTTP clients for the external providers.

  - DistanceMatrixClient: Google Distance Matrix (durations in traffic)
  - OnWaterClient: onwater.io land/water lookup
  - GeocodingClient: Google reverse geocoding (country of a coordinate)

Every request goes through a requests.Session with a retry adapter, carries a
timeout, and respects a minimum interval between requests of the same client
(shared across worker threads).
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter, Retry

from traffic.conf import TrafficConfig
from traffic.exceptions import ProviderError
from traffic.geo import Coordinate

logger = logging.getLogger(__name__)

DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
ONWATER_URL = "https://api.onwater.io/api/v1/results/{lat},{lng}"

USER_AGENT = "traffictrack/1.0"


def make_session() -> requests.Session:
    sess = requests.Session()
    retries = Retry(
        total=6,
        connect=3,
        read=3,
        backoff_factor=1.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET"]),
    )
    sess.mount("https://", HTTPAdapter(max_retries=retries))
    sess.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }
    )
    return sess


class _JsonClient:
    name = "provider"

    def __init__(self, config: TrafficConfig, session_factory: Optional[Callable[[], requests.Session]] = None):
        self._cfg = config
        self._session_factory = session_factory or make_session
        self._lock = threading.Lock()
        self._last_request_at = 0.0

    def _sleep_if_needed(self) -> None:
        if self._cfg.min_request_interval <= 0:
            return
        with self._lock:
            wait = self._cfg.min_request_interval - (time.monotonic() - self._last_request_at)
            if wait > 0:
                time.sleep(wait)
            self._last_request_at = time.monotonic()

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        self._sleep_if_needed()
        try:
            with self._session_factory() as sess:
                resp = sess.get(url, params=params, timeout=self._cfg.request_timeout)
                resp.raise_for_status()
                payload = resp.json()
        except requests.RequestException as e:
            raise ProviderError(self.name, f"HTTP error: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ProviderError(self.name, f"unexpected payload type {type(payload).__name__}")
        return payload


class DistanceMatrixClient(_JsonClient):
    name = "distance-matrix"

    def matrix(
        self,
        origins: Sequence[str],
        destinations: Sequence[str],
        departure_time: datetime,
    ) -> Dict[str, Any]:
        """
        Pairwise driving matrix for "lat,lng" strings, traffic model best_guess.

        Returns the raw payload (origin_addresses, destination_addresses, rows).
        """
        params = {
            "origins": "|".join(origins),
            "destinations": "|".join(destinations),
            "departure_time": str(round(departure_time.timestamp())),
            "mode": "driving",
            "units": "metric",
            "traffic_model": "best_guess",
            "key": self._cfg.maps_api_key,
        }
        logger.debug("[matrix] %d x %d departure=%s", len(origins), len(destinations), params["departure_time"])
        payload = self._get_json(DISTANCE_MATRIX_URL, params)
        status = payload.get("status")
        if status != "OK":
            raise ProviderError(self.name, payload.get("error_message") or "request failed", status=status)
        return payload


class OnWaterClient(_JsonClient):
    name = "onwater"

    def is_water(self, coordinate: Coordinate) -> bool:
        url = ONWATER_URL.format(lat=coordinate.lat, lng=coordinate.lng)
        payload = self._get_json(url, {"access_token": self._cfg.onwater_api_key})
        if payload.get("error"):
            raise ProviderError(self.name, str(payload["error"]))
        if "water" not in payload:
            raise ProviderError(self.name, "response has no 'water' field")
        return bool(payload["water"])


class GeocodingClient(_JsonClient):
    name = "geocoding"

    def reverse(self, coordinate: Coordinate) -> Dict[str, Any]:
        payload = self._get_json(GEOCODE_URL, {"latlng": coordinate.as_query(), "key": self._cfg.maps_api_key})
        status = payload.get("status")
        if status != "OK":
            raise ProviderError(self.name, payload.get("error_message") or "no result", status=status)
        return payload

    def country(self, coordinate: Coordinate) -> Optional[str]:
        """Long name of the "country" address component of the first result, or None."""
        results = self.reverse(coordinate).get("results") or []
        if not results:
            return None
        for component in results[0].get("address_components", []):
            if "country" in component.get("types", []):
                return component.get("long_name")
        return None
