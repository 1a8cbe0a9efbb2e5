# traffic/management/commands/add_location.py
from django.core.management.base import BaseCommand, CommandError

from traffic.exceptions import DuplicateLocationError
from traffic.services import TrafficTracker


class Command(BaseCommand):
    help = "Register a location (name + center) then build and classify its ring of points."

    def add_arguments(self, p):
        p.add_argument("--name", required=True, help="unique location name, e.g. Dublin")
        p.add_argument("--lat", type=float, required=True, help="center latitude (decimal degrees)")
        p.add_argument("--lng", type=float, required=True, help="center longitude (decimal degrees)")
        p.add_argument("--no-update", action="store_true", help="only register, skip points/land/country")

    def handle(self, *args, **o):
        if not -90 <= o["lat"] <= 90 or not -180 <= o["lng"] <= 180:
            raise CommandError(f"Invalid coordinate: {o['lat']},{o['lng']}")

        tracker = TrafficTracker.from_config()
        try:
            location = tracker.register(o["name"], o["lat"], o["lng"])
        except DuplicateLocationError as e:
            raise CommandError(str(e)) from e
        except ValueError as e:
            raise CommandError(str(e)) from e

        self.stdout.write(f"[add] {location.name} saved to locations collection")

        if o["no_update"]:
            return

        report = tracker.update_all(names=[location.name])
        if location.name in report.geometry_failed:
            self.stderr.write(f"[add] could not build points for {location.name}")
        else:
            self.stdout.write(
                f"[add] points for {location.name}: land={report.land} water={report.water} unknown={report.unknown}"
            )
        if location.name in report.countries:
            self.stdout.write(f"[add] country: {report.countries[location.name]}")
