"""
Tests for the read API (/api/...).
"""

from datetime import datetime, timezone

import pytest

from traffic.models import Reading

pytestmark = pytest.mark.django_db


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True, "db": True}


class TestLocations:
    def test_lists_ring_and_reading_count(self, client, tracker, dublin):
        tracker.run_cycle()
        data = client.get("/api/locations").json()["results"]
        assert len(data) == 1
        assert data[0]["name"] == "Dublin"
        assert data[0]["reading_count"] == 1
        assert data[0]["country"] is None
        assert [p["name"] for p in data[0]["points"]][:3] == ["CENTER", "N", "NE"]
        assert data[0]["points"][0]["on_land"] is True

    def test_country_filter(self, client, tracker, dublin):
        tracker.backfill_country(dublin)
        assert len(client.get("/api/locations?country=ireland").json()["results"]) == 1
        assert client.get("/api/locations?country=France").json()["results"] == []


class TestReadings:
    def _reading(self, location, when, trips=3):
        return Reading.objects.create(
            location=location,
            time=when,
            trips=trips,
            average_time=100.0 if trips else None,
            average_distance=1000.0 if trips else None,
            total_time=300.0 if trips else 0,
            total_distance=3000.0 if trips else 0,
        )

    def test_newest_first(self, client, dublin):
        self._reading(dublin, datetime(2024, 3, 1, 7, tzinfo=timezone.utc))
        self._reading(dublin, datetime(2024, 3, 1, 8, tzinfo=timezone.utc), trips=0)

        body = client.get("/api/locations/Dublin/readings").json()

        assert body["count"] == 2
        assert body["results"][0]["time"] == "2024-03-01T08:00:00+00:00"
        assert body["results"][0]["has_data"] is False
        assert body["results"][0]["average_time"] is None
        assert body["results"][1]["average_time"] == 100.0
        assert "raw" not in body["results"][0]

    def test_since_and_limit(self, client, dublin):
        for hour in (6, 7, 8):
            self._reading(dublin, datetime(2024, 3, 1, hour, tzinfo=timezone.utc))

        body = client.get("/api/locations/Dublin/readings?since=2024-03-01T07:00:00Z").json()
        assert body["count"] == 2

        body = client.get("/api/locations/Dublin/readings?limit=1").json()
        assert body["count"] == 1

    def test_bad_since(self, client, dublin):
        response = client.get("/api/locations/Dublin/readings?since=not-a-date")
        assert response.status_code == 400

    def test_unknown_location(self, client):
        assert client.get("/api/locations/Nowhere/readings").status_code == 404
