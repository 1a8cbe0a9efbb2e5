# traffic/aggregate.py
"""
Reduce a pairwise distance/duration matrix into one summary record.

Matrix layout (Google Distance Matrix):
  - origin_addresses[i], destination_addresses[j]: human readable labels
  - rows[i]["elements"][j]: {"status": "OK", "distance": {"value": m},
                             "duration_in_traffic": {"value": s}, ...}

Only cells with status OK and a distance > 0 count as trips; the diagonal
(a point to itself) has distance 0 and drops out on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from traffic.exceptions import MatrixError

STATUS_OK = "OK"


@dataclass(frozen=True)
class PairStat:
    """One extremum: the value, its companion metric, and the two endpoints."""

    value: float = 0
    companion: float = 0
    origin: str = ""
    destination: str = ""

    def as_record(self, companion_key: str) -> Dict[str, Any]:
        # stored shape: {"value", "<distance|time>", "from", "to"}
        return {
            "value": self.value,
            companion_key: self.companion,
            "from": self.origin,
            "to": self.destination,
        }

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]], companion_key: str) -> "PairStat":
        if not record:
            return cls()
        return cls(
            value=record.get("value", 0),
            companion=record.get(companion_key, 0),
            origin=record.get("from", ""),
            destination=record.get("to", ""),
        )


@dataclass(frozen=True)
class MatrixSummary:
    """
    Aggregated statistics of one matrix.

    average_time / average_distance are None when no trip was valid
    (trips == 0): the "no data" variant, never NaN.
    """

    trips: int
    total_time: float
    total_distance: float
    average_time: Optional[float]
    average_distance: Optional[float]
    min_time: PairStat
    max_time: PairStat
    min_distance: PairStat
    max_distance: PairStat
    raw: Optional[Dict[str, Any]] = field(default=None, compare=False, repr=False)

    @property
    def has_data(self) -> bool:
        return self.trips > 0

    def as_reading(self) -> Dict[str, Any]:
        """Field mapping for a Reading row (raw included)."""
        return {
            "trips": self.trips,
            "average_time": self.average_time,
            "average_distance": self.average_distance,
            "total_time": self.total_time,
            "total_distance": self.total_distance,
            "min_time": self.min_time.as_record("distance"),
            "max_time": self.max_time.as_record("distance"),
            "min_distance": self.min_distance.as_record("time"),
            "max_distance": self.max_distance.as_record("time"),
            "raw": self.raw,
        }


def _cell_value(cell: Mapping[str, Any], key: str, i: int, j: int) -> float:
    try:
        value = cell[key]["value"]
    except (KeyError, TypeError) as e:
        raise MatrixError(f"cell ({i}, {j}) has status OK but no {key}.value") from e
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MatrixError(f"cell ({i}, {j}) has non-numeric {key}.value: {value!r}")
    return value


def _average(total: float, count: int) -> Optional[float]:
    if count == 0:
        return None
    return round(total / count, 2)


def aggregate(
    rows: Sequence[Mapping[str, Any]],
    origin_labels: Sequence[str],
    destination_labels: Sequence[str],
    raw: Optional[Dict[str, Any]] = None,
) -> MatrixSummary:
    """
    Aggregate matrix rows into a MatrixSummary.

    Per accepted cell the extrema are updated with an if/elif pair for each
    dimension: a cell that raises the max is not compared against the min of
    the same dimension in that pass. Comparisons are strict, so on ties the
    first cell seen (origin-major order) is kept.
    """
    if len(rows) < len(origin_labels):
        raise MatrixError(f"matrix has {len(rows)} rows for {len(origin_labels)} origins")

    trips = 0
    total_time = 0
    total_distance = 0

    min_distance = PairStat()
    max_distance = PairStat()
    min_time = PairStat()
    max_time = PairStat()

    for i, origin in enumerate(origin_labels):
        try:
            elements = rows[i]["elements"]
        except (KeyError, TypeError) as e:
            raise MatrixError(f"row {i} has no elements") from e
        if len(elements) < len(destination_labels):
            raise MatrixError(f"row {i} has {len(elements)} elements for {len(destination_labels)} destinations")

        for j, destination in enumerate(destination_labels):
            cell = elements[j]
            if not isinstance(cell, Mapping):
                raise MatrixError(f"cell ({i}, {j}) is not an object: {cell!r}")
            if cell.get("status") != STATUS_OK:
                continue
            distance = _cell_value(cell, "distance", i, j)
            if not distance > 0:
                continue
            time = _cell_value(cell, "duration_in_traffic", i, j)

            if distance > max_distance.value:
                max_distance = PairStat(distance, time, origin, destination)
            elif min_distance.value == 0 or distance < min_distance.value:
                min_distance = PairStat(distance, time, origin, destination)

            if time > max_time.value:
                max_time = PairStat(time, distance, origin, destination)
            elif min_time.value == 0 or time < min_time.value:
                min_time = PairStat(time, distance, origin, destination)

            trips += 1
            total_time += time
            total_distance += distance

    return MatrixSummary(
        trips=trips,
        total_time=total_time,
        total_distance=total_distance,
        average_time=_average(total_time, trips),
        average_distance=_average(total_distance, trips),
        min_time=min_time,
        max_time=max_time,
        min_distance=min_distance,
        max_distance=max_distance,
        raw=raw,
    )


def aggregate_matrix(payload: Mapping[str, Any]) -> MatrixSummary:
    """Aggregate a raw provider payload, keeping it as the summary's ``raw``."""
    try:
        origins: List[str] = list(payload["origin_addresses"])
        destinations: List[str] = list(payload["destination_addresses"])
        rows = payload["rows"]
    except (KeyError, TypeError) as e:
        raise MatrixError(f"matrix payload is missing {e}") from e
    return aggregate(rows, origins, destinations, raw=dict(payload))
