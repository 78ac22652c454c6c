# polyarb/scheduler.py
"""
Fixed-interval scheduler
Runs a job immediately, then on a fixed-rate grid until stopped
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalScheduler:
    """
    Single-threaded ticker.

    Ticks land on ``start + k * interval``. A job that overruns its slot
    delays the next tick instead of overlapping it.
    """

    def __init__(
        self,
        interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_seconds < 0:
            raise ValueError(f"interval must be >= 0, got {interval_seconds}")
        self.interval = interval_seconds
        self._clock = clock
        self._stop = threading.Event()
        self.runs = 0

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self):
        """Ask the loop to exit; safe to call from a signal handler"""
        self._stop.set()

    def run(self, job: Callable[[], object], max_runs: Optional[int] = None):
        """Block running ``job`` until stop() or ``max_runs`` is reached"""
        next_run = self._clock()

        while not self._stop.is_set():
            job()
            self.runs += 1

            if max_runs is not None and self.runs >= max_runs:
                break

            next_run += self.interval
            delay = next_run - self._clock()

            if delay < 0:
                logger.warning(
                    f"⚠️ Cycle overran the {self.interval:.1f}s interval by {-delay:.1f}s"
                )
                next_run = self._clock()
                delay = 0

            if self._stop.wait(delay):
                break
