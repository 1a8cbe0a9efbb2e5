import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Location",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.TextField(unique=True)),
                ("lat", models.FloatField()),
                ("lng", models.FloatField()),
                ("country", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "locations",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Point",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "name",
                    models.CharField(
                        choices=[
                            ("CENTER", "CENTER"),
                            ("N", "N"),
                            ("NE", "NE"),
                            ("E", "E"),
                            ("SE", "SE"),
                            ("S", "S"),
                            ("SW", "SW"),
                            ("W", "W"),
                            ("NW", "NW"),
                        ],
                        max_length=6,
                    ),
                ),
                ("position", models.PositiveSmallIntegerField()),
                ("lat", models.FloatField()),
                ("lng", models.FloatField()),
                ("on_land", models.BooleanField(blank=True, null=True)),
                (
                    "location",
                    models.ForeignKey(
                        db_column="location_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="points",
                        to="traffic.location",
                    ),
                ),
            ],
            options={
                "db_table": "points",
                "ordering": ["location", "position"],
            },
        ),
        migrations.CreateModel(
            name="Reading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("time", models.DateTimeField(default=django.utils.timezone.now)),
                ("trips", models.PositiveIntegerField(default=0)),
                ("average_time", models.FloatField(blank=True, null=True)),
                ("average_distance", models.FloatField(blank=True, null=True)),
                ("total_time", models.FloatField(default=0)),
                ("total_distance", models.FloatField(default=0)),
                ("min_time", models.JSONField(default=dict)),
                ("max_time", models.JSONField(default=dict)),
                ("min_distance", models.JSONField(default=dict)),
                ("max_distance", models.JSONField(default=dict)),
                ("raw", models.JSONField(blank=True, null=True)),
                (
                    "location",
                    models.ForeignKey(
                        db_column="location_id",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="readings",
                        to="traffic.location",
                    ),
                ),
            ],
            options={
                "db_table": "readings",
                "ordering": ["location", "time", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="point",
            constraint=models.UniqueConstraint(fields=("location", "name"), name="uq_point_location_name"),
        ),
        migrations.AddIndex(
            model_name="reading",
            index=models.Index(fields=["location", "time"], name="idx_reading_loc_time"),
        ),
    ]
