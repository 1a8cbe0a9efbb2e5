# traffic/scheduler.py
from __future__ import annotations

import logging
import math
import random
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from django.db import connections
from django.utils import timezone

logger = logging.getLogger(__name__)


def next_fire_time(now: datetime, minute: int = 0, interval_minutes: int = 60) -> datetime:
    """
    First fire time strictly after ``now``.

    Fire times are the instants ``minute`` (mod ``interval_minutes``) past
    midnight in ``now``'s timezone, repeating every ``interval_minutes``;
    minute=0, interval=60 is cron "0 * * * *".
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    step = timedelta(minutes=interval_minutes)
    anchor = minute % interval_minutes
    start = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(minutes=anchor)
    k = math.floor((now - start) / step) + 1
    return start + k * step


class Scheduler:
    """
    Fires ``job`` on a fixed cadence.

    A tick that comes while the previous job is still running is skipped, so
    at most one cycle runs at a time.
    """

    def __init__(
        self,
        job: Callable[[], object],
        minute: int = 0,
        interval_minutes: int = 60,
        jitter_seconds: float = 0.0,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self._job = job
        self.minute = minute
        self.interval_minutes = interval_minutes
        self.jitter_seconds = max(0.0, jitter_seconds)
        self._clock = clock
        self._running = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._running.locked()

    def tick(self) -> bool:
        """Start one job in the background. False when a job is already running."""
        if not self._running.acquire(blocking=False):
            logger.warning("[scheduler] previous cycle still running, tick skipped")
            return False
        self._thread = threading.Thread(target=self._run_job, name="traffic-cycle", daemon=True)
        self._thread.start()
        return True

    def _run_job(self) -> None:
        logger.info("[scheduler] cycle started at %s", self._clock().isoformat())
        try:
            self._job()
        except Exception:
            logger.exception("[scheduler] cycle failed")
        finally:
            # this thread owns its own DB connection
            connections.close_all()
            self._running.release()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def delay_until_next(self) -> float:
        now = self._clock()
        fire = next_fire_time(now, self.minute, self.interval_minutes)
        delay = (fire - now).total_seconds()
        if self.jitter_seconds:
            delay += random.uniform(0, self.jitter_seconds)
        return delay

    def run_forever(self) -> None:
        logger.info(
            "[scheduler] started | minute=%d interval=%dmin jitter=%.0fs",
            self.minute,
            self.interval_minutes,
            self.jitter_seconds,
        )
        while not self._stop.is_set():
            if self._stop.wait(self.delay_until_next()):
                break
            self.tick()
        logger.info("[scheduler] stopped")

    def stop(self) -> None:
        self._stop.set()
