# traffic/management/commands/run_tracker.py
from django.core.management.base import BaseCommand

from traffic.conf import TrafficConfig
from traffic.scheduler import Scheduler
from traffic.services import TrafficTracker


class Command(BaseCommand):
    help = "Start the scheduler: one sampling cycle over all locations per tick (default: every hour on the hour)."

    def add_arguments(self, p):
        p.add_argument("--minute", type=int, default=None, help="minute past the hour to fire at")
        p.add_argument("--interval", type=int, default=None, help="minutes between cycles")
        p.add_argument("--jitter", type=float, default=None, help="random delay added to each tick (s)")
        p.add_argument("--once", action="store_true", help="run a single cycle now and exit")

    def handle(self, *args, **o):
        config = TrafficConfig.from_settings()
        tracker = TrafficTracker.from_config(config)

        def cycle():
            report = tracker.run_cycle()
            self.stdout.write(
                f"[run] cycle {report.started_at.isoformat()} | saved={len(report.saved)} failed={len(report.failed)}"
            )
            for name, err in sorted(report.failed.items()):
                self.stderr.write(f"[run] {name}: {err}")

        if o["once"]:
            cycle()
            return

        scheduler = Scheduler(
            cycle,
            minute=config.schedule_minute if o["minute"] is None else o["minute"],
            interval_minutes=config.schedule_interval_minutes if o["interval"] is None else o["interval"],
            jitter_seconds=config.schedule_jitter_seconds if o["jitter"] is None else o["jitter"],
        )
        self.stdout.write(
            f"Starting scheduler... minute={scheduler.minute} interval={scheduler.interval_minutes}min"
        )
        try:
            scheduler.run_forever()
        except KeyboardInterrupt:
            self.stdout.write("Stopping scheduler...")
            scheduler.stop()
            scheduler.join()
