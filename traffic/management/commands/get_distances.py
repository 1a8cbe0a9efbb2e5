# traffic/management/commands/get_distances.py
from django.core.management.base import BaseCommand, CommandError

from traffic.exceptions import TrafficTrackError
from traffic.models import Location
from traffic.report import render_summary
from traffic.services import TrafficTracker


class Command(BaseCommand):
    help = (
        "Sample the distance matrix now. With --name: print the report for one location "
        "(stored only with --save). Without: run one cycle over all locations and store the readings."
    )

    def add_arguments(self, p):
        p.add_argument("--name", type=str, default="", help="single location to sample and print")
        p.add_argument("--save", action="store_true", help="with --name: also store the reading")

    def handle(self, *args, **o):
        tracker = TrafficTracker.from_config()

        if o["name"]:
            try:
                location = Location.objects.get(name=o["name"])
            except Location.DoesNotExist:
                raise CommandError(f"Unknown location: {o['name']}")
            try:
                summary = tracker.sample(location)
            except TrafficTrackError as e:
                raise CommandError(f"{location.name}: {e}") from e

            self.stdout.write(render_summary(location.name, summary))
            if o["save"]:
                tracker.store(location, summary)
                self.stdout.write(f"[get] added latest reading for {location.name}")
            return

        report = tracker.run_cycle()
        for name in report.saved:
            suffix = " (no data)" if name in report.no_data else ""
            self.stdout.write(f"[get] added latest reading for {name}{suffix}")
        for name, err in sorted(report.failed.items()):
            self.stderr.write(f"[get] {name}: {err}")
        self.stdout.write(f"[get] all done | saved={len(report.saved)} failed={len(report.failed)}")
