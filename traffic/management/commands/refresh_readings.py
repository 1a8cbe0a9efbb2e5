# traffic/management/commands/refresh_readings.py
from django.core.management.base import BaseCommand

from traffic.services import TrafficTracker


class Command(BaseCommand):
    help = "Remove every stored reading from all locations (locations, points and countries are kept)."

    def handle(self, *args, **options):
        deleted = TrafficTracker.from_config().clear_readings()
        self.stdout.write(f"[refresh] removed all traffic data ({deleted} readings)")
