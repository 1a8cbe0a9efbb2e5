# traffic/conf.py
from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings


@dataclass(frozen=True)
class TrafficConfig:
    """Runtime configuration for the tracker and its provider clients.

    Built once from Django settings (see ``traffictrack/settings.py``) and
    passed explicitly to every collaborator.
    """

    maps_api_key: str = ""
    onwater_api_key: str = ""
    radius_km: float = 10.0
    request_timeout: float = 30.0
    min_request_interval: float = 0.0
    workers: int = 4
    schedule_minute: int = 0
    schedule_interval_minutes: int = 60
    schedule_jitter_seconds: float = 0.0

    @classmethod
    def from_settings(cls) -> "TrafficConfig":
        return cls(
            maps_api_key=getattr(settings, "MAPS_API_KEY", ""),
            onwater_api_key=getattr(settings, "ONWATER_API_KEY", ""),
            radius_km=float(getattr(settings, "TRAFFIC_RING_RADIUS_KM", 10.0)),
            request_timeout=float(getattr(settings, "TRAFFIC_REQUEST_TIMEOUT", 30.0)),
            min_request_interval=float(getattr(settings, "TRAFFIC_MIN_REQUEST_INTERVAL", 0.0)),
            workers=int(getattr(settings, "TRAFFIC_WORKERS", 4)),
            schedule_minute=int(getattr(settings, "TRAFFIC_SCHEDULE_MINUTE", 0)),
            schedule_interval_minutes=int(getattr(settings, "TRAFFIC_SCHEDULE_INTERVAL_MINUTES", 60)),
            schedule_jitter_seconds=float(getattr(settings, "TRAFFIC_SCHEDULE_JITTER_SECONDS", 0.0)),
        )

    @property
    def effective_workers(self) -> int:
        # same clamp as the batch fetcher: 1..16
        return min(max(1, int(self.workers or 1)), 16)
