# traffic/report.py
from __future__ import annotations

from typing import List

from traffic.aggregate import MatrixSummary, PairStat

RULE = "------------------------------------------------------"


def seconds_to_clock(seconds: float) -> str:
    """Whole seconds -> "HH:MM:SS" (hours are not wrapped at 24)."""
    total = int(seconds)
    hours = total // 3600
    minutes = (total - hours * 3600) // 60
    secs = total - hours * 3600 - minutes * 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _km(meters: float) -> str:
    return f"{meters / 1000:.2f} Km"


def _pair_lines(title: str, headline: str, stat: PairStat) -> List[str]:
    return [RULE, "", f"{title}: {headline}", stat.origin, "to", stat.destination]


def render_summary(location_name: str, summary: MatrixSummary) -> str:
    """Console report for one location, as printed by ``get_distances --name``."""
    if not summary.has_data:
        return "\n".join([RULE, "", f"{location_name}: no valid trips in matrix (no data)", RULE])

    lines = [
        RULE,
        "",
        f"{location_name}",
        f"Average trip time is {seconds_to_clock(summary.average_time)} based on {summary.trips} trips",
        f"Average distance is {_km(summary.average_distance)} based on {summary.trips} trips",
        f"Total Time is {seconds_to_clock(summary.total_time)}",
        f"Total distance is {_km(summary.total_distance)}",
    ]
    lines += _pair_lines(
        "MIN TRIP DISTANCE",
        f"{_km(summary.min_distance.value)} ({seconds_to_clock(summary.min_distance.companion)})",
        summary.min_distance,
    )
    lines += _pair_lines(
        "MAX TRIP DISTANCE",
        f"{_km(summary.max_distance.value)} ({seconds_to_clock(summary.max_distance.companion)})",
        summary.max_distance,
    )
    lines += _pair_lines(
        "MIN TRIP TIME",
        f"{seconds_to_clock(summary.min_time.value)} ({_km(summary.min_time.companion)})",
        summary.min_time,
    )
    lines += _pair_lines(
        "MAX TRIP TIME",
        f"{seconds_to_clock(summary.max_time.value)} ({_km(summary.max_time.companion)})",
        summary.max_time,
    )
    lines.append(RULE)
    return "\n".join(lines)
