"""Ring geometry around a location center (no external dependencies).

The ring is the CENTER point plus eight compass points at a fixed radius,
computed with the spherical destination-point formula.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

from traffic.exceptions import GeometryError

EARTH_RADIUS_KM: Final[float] = 6371.0

CENTER: Final[str] = "CENTER"

# bearing (degrees clockwise from true north) -> point name, in ring order
COMPASS_BEARINGS: Final[tuple[tuple[int, str], ...]] = (
    (0, "N"),
    (45, "NE"),
    (90, "E"),
    (135, "SE"),
    (180, "S"),
    (225, "SW"),
    (270, "W"),
    (315, "NW"),
)

POINT_NAMES: Final[tuple[str, ...]] = (CENTER,) + tuple(name for _, name in COMPASS_BEARINGS)

RING_SIZE: Final[int] = len(POINT_NAMES)


@dataclass(frozen=True, slots=True)
class Coordinate:
    lat: float
    lng: float

    def as_query(self) -> str:
        """``"lat,lng"`` string as expected by the Google APIs."""

        return f"{self.lat},{self.lng}"


@dataclass(frozen=True, slots=True)
class RingPoint:
    """A named ring point, coordinates already rounded to 3 decimals."""

    name: str
    lat: float
    lng: float
    bearing: int | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180


def radians_to_degrees(radians: float) -> float:
    return radians * 180 / math.pi


def destination_point(origin: Coordinate, bearing_deg: float, distance_km: float) -> Coordinate:
    """Point reached from ``origin`` after ``distance_km`` along ``bearing_deg``.

    Args:
        origin: Start coordinate in decimal degrees.
        bearing_deg: Bearing in degrees clockwise from true north.
        distance_km: Great-circle distance in kilometers.

    Returns:
        Destination coordinate in decimal degrees (unrounded).

    Raises:
        GeometryError: if the result is not a finite number.
    """

    angular = distance_km / EARTH_RADIUS_KM
    brng = degrees_to_radians(bearing_deg)
    lat1 = degrees_to_radians(origin.lat)
    lon1 = degrees_to_radians(origin.lng)

    try:
        lat2 = math.asin(
            math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(angular) * math.cos(brng)
        )
        lon2 = lon1 + math.atan2(
            math.sin(brng) * math.sin(angular) * math.cos(lat1),
            math.cos(angular) - math.sin(lat1) * math.sin(lat2),
        )
    except (ValueError, OverflowError) as e:
        # asin outside [-1, 1] or inf input
        raise GeometryError(
            f"no destination from ({origin.lat}, {origin.lng}) at bearing {bearing_deg}: {e}"
        ) from e

    if not (math.isfinite(lat2) and math.isfinite(lon2)):
        raise GeometryError(f"non-finite destination from ({origin.lat}, {origin.lng}) at bearing {bearing_deg}")

    return Coordinate(radians_to_degrees(lat2), radians_to_degrees(lon2))


def generate_ring(center: Coordinate, radius_km: float) -> list[RingPoint]:
    """Build the 9-point ring around ``center``.

    The first point is CENTER, followed by N, NE, E, SE, S, SW, W, NW at
    ``radius_km``. Any point that cannot be computed aborts the whole ring
    with GeometryError, so callers never store a partial ring.
    """

    if not (math.isfinite(center.lat) and math.isfinite(center.lng)):
        raise GeometryError(f"non-finite center ({center.lat}, {center.lng})")

    ring = [RingPoint(CENTER, round(center.lat, 3), round(center.lng, 3))]
    for bearing, name in COMPASS_BEARINGS:
        dest = destination_point(center, bearing, radius_km)
        ring.append(RingPoint(name, round(dest.lat, 3), round(dest.lng, 3), bearing))
    return ring
