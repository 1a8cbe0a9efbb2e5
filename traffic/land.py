# traffic/land.py
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol

from traffic.exceptions import ProviderError
from traffic.geo import Coordinate

logger = logging.getLogger(__name__)


class WaterClassifier(Protocol):
    def is_water(self, coordinate: Coordinate) -> bool: ...


class LandFilter:
    """
    Tri-state land classification of ring points.

    classify() returns True (land), False (water) or None (unknown, provider
    failed). Points that already carry a flag are returned as-is without a
    provider call.
    """

    def __init__(self, classifier: WaterClassifier):
        self._classifier = classifier

    def classify(self, point) -> Optional[bool]:
        if point.on_land is not None:
            return point.on_land
        try:
            water = self._classifier.is_water(Coordinate(point.lat, point.lng))
        except ProviderError as e:
            logger.warning("[land] %s (%s, %s) left unknown: %s", point.name, point.lat, point.lng, e)
            return None
        return not water

    @staticmethod
    def usable(points: Iterable) -> List:
        """Points usable as sampling endpoints: only those known to be on land."""
        return [p for p in points if p.on_land is True]
