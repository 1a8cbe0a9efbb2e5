# traffic/views.py
from datetime import timezone as dt_timezone

from dateutil import parser as dateparser
from django.db import connection
from django.db.models import Count
from django.http import JsonResponse
from rest_framework.decorators import api_view

from traffic.models import Location, Reading

MAX_LIMIT = 1000


def _json(data, status=200):
    # safe=False so lists and dicts both work
    return JsonResponse(data, status=status, safe=False)


def _parse_since(value):
    """ISO-ish timestamp -> aware UTC datetime; naive input is taken as UTC."""
    t = dateparser.parse(value)
    if t.tzinfo is None:
        return t.replace(tzinfo=dt_timezone.utc)
    return t.astimezone(dt_timezone.utc)


def _reading_json(r: Reading):
    return {
        "time": r.time.astimezone(dt_timezone.utc).isoformat(),
        "trips": r.trips,
        "has_data": r.has_data,
        "average_time": r.average_time,
        "average_distance": r.average_distance,
        "total_time": r.total_time,
        "total_distance": r.total_distance,
        "min_time": r.min_time,
        "max_time": r.max_time,
        "min_distance": r.min_distance,
        "max_distance": r.max_distance,
    }


@api_view(["GET"])
def health(request):
    with connection.cursor() as cur:
        cur.execute("SELECT 1;")
        one = cur.fetchone()[0]
    return _json({"ok": True, "db": one == 1})


@api_view(["GET"])
def locations(request):
    """
    Every location with its ring and the number of stored readings.
    Optional filter: ?country=Ireland
    """
    qs = Location.objects.prefetch_related("points").annotate(reading_count=Count("readings"))
    country = (request.GET.get("country") or "").strip()
    if country:
        qs = qs.filter(country__iexact=country)

    data = [
        {
            "name": loc.name,
            "lat": loc.lat,
            "lng": loc.lng,
            "country": loc.country or None,
            "reading_count": loc.reading_count,
            "points": [
                {"name": p.name, "lat": p.lat, "lng": p.lng, "on_land": p.on_land}
                for p in loc.points.all()
            ],
        }
        for loc in qs
    ]
    return _json({"results": data})


@api_view(["GET"])
def location_readings(request, name):
    """
    Reading history of one location, newest first (raw matrix not included).
    ?since=<timestamp>  only readings at or after that time
    ?limit=<n>          at most n readings (default 100, max 1000)
    """
    try:
        location = Location.objects.get(name=name)
    except Location.DoesNotExist:
        return _json({"error": f"Unknown location: {name}"}, status=404)

    try:
        limit = int(request.GET.get("limit", 100))
    except ValueError:
        return _json({"error": "limit must be an integer"}, status=400)
    limit = max(1, min(limit, MAX_LIMIT))

    qs = location.readings.order_by("-time", "-id")
    since = request.GET.get("since")
    if since:
        try:
            qs = qs.filter(time__gte=_parse_since(since))
        except (ValueError, OverflowError):
            return _json({"error": "Invalid since"}, status=400)

    data = [_reading_json(r) for r in qs[:limit]]
    return _json({"location": location.name, "count": len(data), "results": data})
