# traffic/management/commands/update_points.py
from django.core.management.base import BaseCommand

from traffic.services import TrafficTracker


class Command(BaseCommand):
    help = (
        "Build missing point rings, classify unknown points as land/water and fill missing countries "
        "for every location. Determined land flags are kept unless --force-land."
    )

    def add_arguments(self, p):
        p.add_argument("--name", action="append", default=[], help="limit to this location (repeatable)")
        p.add_argument(
            "--force-land",
            action="store_true",
            help="clear land flags and classify every point again",
        )

    def handle(self, *args, **o):
        tracker = TrafficTracker.from_config()
        report = tracker.update_all(force_land=o["force_land"], names=o["name"] or None)

        for name in report.points_added:
            self.stdout.write(f"[update] added points for {name}")
        for name in report.geometry_failed:
            self.stderr.write(f"[update] could not compute points for {name}")
        for name, country in report.countries.items():
            self.stdout.write(f"[update] added country for {name}: {country}")

        self.stdout.write(
            f"[update] Done. land={report.land} water={report.water} unknown={report.unknown}"
        )
