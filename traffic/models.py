# traffic/models.py
from django.db import models
from django.utils import timezone

from traffic.geo import POINT_NAMES


class Location(models.Model):
    name = models.TextField(unique=True)
    lat = models.FloatField()
    lng = models.FloatField()
    # "" until reverse geocoding fills it
    country = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "locations"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Point(models.Model):
    NAME_CHOICES = [(n, n) for n in POINT_NAMES]

    location = models.ForeignKey(
        Location, on_delete=models.CASCADE, related_name="points", db_column="location_id"
    )
    name = models.CharField(max_length=6, choices=NAME_CHOICES)
    position = models.PositiveSmallIntegerField()  # 0 = CENTER, then N..NW
    lat = models.FloatField()
    lng = models.FloatField()
    # NULL = not classified yet, True = land, False = water
    on_land = models.BooleanField(null=True, blank=True)

    class Meta:
        db_table = "points"
        ordering = ["location", "position"]
        constraints = [
            models.UniqueConstraint(fields=["location", "name"], name="uq_point_location_name"),
        ]

    def __str__(self):
        return f"{self.location_id}:{self.name}"

    @property
    def query(self) -> str:
        return f"{self.lat},{self.lng}"


class Reading(models.Model):
    location = models.ForeignKey(
        Location, on_delete=models.CASCADE, related_name="readings", db_column="location_id"
    )
    time = models.DateTimeField(default=timezone.now)
    trips = models.PositiveIntegerField(default=0)
    # NULL when trips == 0 (no data)
    average_time = models.FloatField(null=True, blank=True)
    average_distance = models.FloatField(null=True, blank=True)
    total_time = models.FloatField(default=0)
    total_distance = models.FloatField(default=0)
    # {"value", "distance", "from", "to"}
    min_time = models.JSONField(default=dict)
    max_time = models.JSONField(default=dict)
    # {"value", "time", "from", "to"}
    min_distance = models.JSONField(default=dict)
    max_distance = models.JSONField(default=dict)
    raw = models.JSONField(null=True, blank=True)

    class Meta:
        db_table = "readings"
        ordering = ["location", "time", "id"]
        indexes = [
            models.Index(fields=["location", "time"], name="idx_reading_loc_time"),
        ]

    @property
    def has_data(self) -> bool:
        return self.trips > 0
