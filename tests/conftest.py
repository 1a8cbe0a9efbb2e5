"""
Pytest configuration for the traffic app.

Providers are replaced by in-memory fakes; workers=1 keeps every call on the
test thread (and inside the test transaction).
"""

from datetime import datetime, timezone

import pytest

from traffic.conf import TrafficConfig
from traffic.land import LandFilter
from traffic.services import TrafficTracker
from tests.factories import FakeClassifier, FakeGeocoder, FakeMatrixClient

FIXED_NOW = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return TrafficConfig(radius_km=10.0, workers=1, request_timeout=5.0)


@pytest.fixture
def matrix_client():
    return FakeMatrixClient()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def tracker(config, matrix_client, classifier, geocoder):
    return TrafficTracker(
        config,
        matrix_client,
        LandFilter(classifier),
        geocoder,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def dublin(db, tracker):
    """Registered location with a full ring, every point on land."""
    location = tracker.register("Dublin", 53.3498, -6.2603)
    tracker.ensure_points(location)
    tracker.classify_points(location)
    return location
