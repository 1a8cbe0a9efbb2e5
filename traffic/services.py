# traffic/services.py
"""
Orchestration of the tracker: registering locations, building and classifying
their point rings, and running sampling cycles.

Provider calls fan out on a thread pool (HTTP in parallel); every database
read and write stays on the calling thread (DB sequential), so writes to one
location are never concurrent.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from traffic.aggregate import MatrixSummary, aggregate_matrix
from traffic.conf import TrafficConfig
from traffic.exceptions import (
    DuplicateLocationError,
    GeometryError,
    InsufficientPointsError,
    TrafficTrackError,
)
from traffic.geo import RING_SIZE, Coordinate, generate_ring
from traffic.land import LandFilter
from traffic.models import Location, Point, Reading
from traffic.providers import DistanceMatrixClient, GeocodingClient, OnWaterClient

logger = logging.getLogger(__name__)

MIN_USABLE_POINTS = 2


@dataclass
class CycleReport:
    """Outcome of one sampling cycle, one entry per attempted location."""

    started_at: datetime
    saved: List[str] = field(default_factory=list)
    no_data: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.saved) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class UpdateReport:
    points_added: List[str] = field(default_factory=list)
    geometry_failed: List[str] = field(default_factory=list)
    land: int = 0
    water: int = 0
    unknown: int = 0
    countries: Dict[str, str] = field(default_factory=dict)


class TrafficTracker:
    def __init__(
        self,
        config: TrafficConfig,
        matrix_client: DistanceMatrixClient,
        land_filter: LandFilter,
        geocoder: GeocodingClient,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.config = config
        self.matrix_client = matrix_client
        self.land_filter = land_filter
        self.geocoder = geocoder
        self._clock = clock

    @classmethod
    def from_config(cls, config: Optional[TrafficConfig] = None) -> "TrafficTracker":
        config = config or TrafficConfig.from_settings()
        return cls(
            config,
            DistanceMatrixClient(config),
            LandFilter(OnWaterClient(config)),
            GeocodingClient(config),
        )

    # ------------------------------------------------------------------
    # fan-out helper
    # ------------------------------------------------------------------
    def _fan_out(self, func: Callable[[Any], Any], items: Sequence[Any]) -> List[Tuple[Any, Any, Optional[BaseException]]]:
        """
        Apply ``func`` to every item, in parallel when workers > 1.

        Returns (item, result, error) in submission order; an item whose call
        raised has result None and the exception as error.
        """
        items = list(items)
        workers = min(self.config.effective_workers, len(items))

        def call(item):
            try:
                return item, func(item), None
            except Exception as e:  # recorded per item, reported by the caller
                return item, None, e

        if workers <= 1:
            return [call(item) for item in items]

        with ThreadPoolExecutor(max_workers=workers) as ex:
            futs = [ex.submit(call, item) for item in items]
            return [fu.result() for fu in futs]

    # ------------------------------------------------------------------
    # locations
    # ------------------------------------------------------------------
    def register(self, name: str, lat: float, lng: float) -> Location:
        name = (name or "").strip()
        if not name:
            raise ValueError("Location name must not be empty")
        if Location.objects.filter(name=name).exists():
            raise DuplicateLocationError(name)
        try:
            with transaction.atomic():
                location = Location.objects.create(name=name, lat=float(lat), lng=float(lng))
        except IntegrityError as e:
            # lost a race against another registration of the same name
            raise DuplicateLocationError(name) from e
        logger.info("[add] %s saved to locations (%s, %s)", location.name, location.lat, location.lng)
        return location

    def ensure_points(self, location: Location) -> bool:
        """Store the ring for ``location`` if it has fewer than 9 points. True when points were (re)built."""
        if location.points.count() >= RING_SIZE:
            return False

        ring = generate_ring(Coordinate(location.lat, location.lng), self.config.radius_km)
        with transaction.atomic():
            location.points.all().delete()
            Point.objects.bulk_create(
                [
                    Point(location=location, name=p.name, position=i, lat=p.lat, lng=p.lng)
                    for i, p in enumerate(ring)
                ]
            )
        logger.info("[points] added %d points for %s", len(ring), location.name)
        return True

    def classify_points(self, location: Location, force: bool = False) -> Dict[str, int]:
        """
        Classify the points of ``location`` whose land flag is unknown.

        force=True clears every flag first (explicit reclassification); the
        default path never touches a determined flag.
        """
        if force:
            cleared = location.points.update(on_land=None)
            logger.info("[land] cleared %d flags for %s", cleared, location.name)

        pending = list(location.points.filter(on_land__isnull=True))
        counts = {"land": 0, "water": 0, "unknown": 0}

        for point, value, err in self._fan_out(self.land_filter.classify, pending):
            if err is not None:
                logger.error("[land] %s %s failed: %s", location.name, point.name, err)
                counts["unknown"] += 1
                continue
            if value is None:
                counts["unknown"] += 1
                continue
            try:
                # guarded on NULL so a flag set meanwhile is kept
                Point.objects.filter(pk=point.pk, on_land__isnull=True).update(on_land=value)
            except DatabaseError as e:
                logger.error("[land] could not store flag for %s %s: %s", location.name, point.name, e)
                counts["unknown"] += 1
                continue
            counts["land" if value else "water"] += 1
            logger.info("[land] updated on_land for %s point in %s: %s", point.name, location.name, value)

        return counts

    def backfill_countries(self, locations: Iterable[Location]) -> Dict[str, str]:
        """Reverse-geocode every location without a country. Returns name -> country for those filled."""
        pending = [loc for loc in locations if not loc.country]
        filled: Dict[str, str] = {}

        def lookup(loc: Location) -> Optional[str]:
            return self.geocoder.country(Coordinate(loc.lat, loc.lng))

        for loc, country, err in self._fan_out(lookup, pending):
            if err is not None:
                logger.warning("[country] %s left empty: %s", loc.name, err)
                continue
            if not country:
                logger.warning("[country] %s: no country component", loc.name)
                continue
            try:
                Location.objects.filter(pk=loc.pk).update(country=country)
            except DatabaseError as e:
                logger.error("[country] could not store country for %s: %s", loc.name, e)
                continue
            loc.country = country
            filled[loc.name] = country
            logger.info("[country] added country for %s: %s", loc.name, country)
        return filled

    def backfill_country(self, location: Location) -> Optional[str]:
        self.backfill_countries([location])
        return location.country or None

    def update_all(self, force_land: bool = False, names: Optional[Sequence[str]] = None) -> UpdateReport:
        """Build missing rings, classify unknown points, then fill missing countries."""
        report = UpdateReport()
        qs = Location.objects.all()
        if names:
            qs = qs.filter(name__in=names)
        locations = list(qs)

        for loc in locations:
            try:
                if self.ensure_points(loc):
                    report.points_added.append(loc.name)
            except GeometryError as e:
                logger.error("[points] %s skipped: %s", loc.name, e)
                report.geometry_failed.append(loc.name)
                continue
            except DatabaseError as e:
                logger.error("[points] could not store points for %s: %s", loc.name, e)
                continue

            try:
                counts = self.classify_points(loc, force=force_land)
            except DatabaseError as e:
                logger.error("[land] could not classify points for %s: %s", loc.name, e)
                continue
            report.land += counts["land"]
            report.water += counts["water"]
            report.unknown += counts["unknown"]

        report.countries = self.backfill_countries(locations)
        return report

    # ------------------------------------------------------------------
    # sampling
    # ------------------------------------------------------------------
    def usable_queries(self, location: Location) -> List[str]:
        """Usable points of ``location`` as "lat,lng" strings, in ring order."""
        points = LandFilter.usable(location.points.all())
        if len(points) < MIN_USABLE_POINTS:
            raise InsufficientPointsError(location.name, len(points))
        return [p.query for p in points]

    def fetch_matrix(self, location: Location, departure: Optional[datetime] = None) -> Dict[str, Any]:
        queries = self.usable_queries(location)
        return self.matrix_client.matrix(queries, queries, departure or self._clock())

    def sample(self, location: Location) -> MatrixSummary:
        """Fresh matrix for ``location``, aggregated. Nothing is stored."""
        return aggregate_matrix(self.fetch_matrix(location))

    def store(self, location: Location, summary: MatrixSummary, at: Optional[datetime] = None) -> Reading:
        reading = Reading.objects.create(location=location, time=at or self._clock(), **summary.as_reading())
        if summary.has_data:
            logger.info("[cycle] added latest reading for %s (%d trips)", location.name, summary.trips)
        else:
            logger.warning("[cycle] added empty reading for %s (no valid trips)", location.name)
        return reading

    def collect(self, location: Location) -> Reading:
        return self.store(location, self.sample(location))

    def run_cycle(self, names: Optional[Sequence[str]] = None) -> CycleReport:
        """
        One sampling cycle: every location (or every named one) attempted once.

        A failure on one location (not enough points, provider, malformed
        matrix, database) is logged and recorded; the others still run.
        """
        started = self._clock()
        report = CycleReport(started_at=started)

        qs = Location.objects.prefetch_related("points")
        if names:
            qs = qs.filter(name__in=names)
        locations = list(qs)

        if names:
            for missing in sorted(set(names) - {loc.name for loc in locations}):
                report.failed[missing] = "unknown location"

        tasks = []
        for loc in locations:
            try:
                tasks.append((loc, self.usable_queries(loc)))
            except InsufficientPointsError as e:
                logger.warning("[cycle] %s skipped: %s", loc.name, e)
                report.failed[loc.name] = str(e)

        logger.info("[cycle] start %s | locations=%d | sampling=%d", started.isoformat(), len(locations), len(tasks))

        def fetch(task):
            _, queries = task
            return self.matrix_client.matrix(queries, queries, started)

        for (loc, _), payload, err in self._fan_out(fetch, tasks):
            if err is not None:
                if isinstance(err, TrafficTrackError):
                    logger.error("[cycle] %s: %s", loc.name, err)
                else:
                    logger.error("[cycle] %s: unexpected error", loc.name, exc_info=err)
                report.failed[loc.name] = str(err)
                continue
            try:
                summary = aggregate_matrix(payload)
                self.store(loc, summary, started)
            except (TrafficTrackError, DatabaseError) as e:
                logger.error("[cycle] %s: %s", loc.name, e)
                report.failed[loc.name] = str(e)
                continue
            report.saved.append(loc.name)
            if not summary.has_data:
                report.no_data.append(loc.name)

        logger.info("[cycle] done | saved=%d failed=%d", len(report.saved), len(report.failed))
        return report

    def clear_readings(self) -> int:
        """Delete every stored reading; locations and their points are untouched."""
        deleted, _ = Reading.objects.all().delete()
        logger.info("[refresh] removed %d readings", deleted)
        return deleted
