"""
Tests for TrafficConfig (traffic.conf).
"""

from traffic.conf import TrafficConfig


class TestTrafficConfig:
    def test_from_settings(self, settings):
        settings.MAPS_API_KEY = "maps"
        settings.TRAFFIC_RING_RADIUS_KM = 5
        settings.TRAFFIC_WORKERS = 2

        config = TrafficConfig.from_settings()

        assert config.maps_api_key == "maps"
        assert config.radius_km == 5.0
        assert config.workers == 2
        assert config.schedule_interval_minutes == 60

    def test_workers_clamped(self):
        assert TrafficConfig(workers=0).effective_workers == 1
        assert TrafficConfig(workers=64).effective_workers == 16
        assert TrafficConfig(workers=4).effective_workers == 4
