"""
Background league clock.

Two daemon threads drive the time-based parts of the league:
- draft-clock: ticks the draft countdown every CLOCK_TICK_SECONDS
- waiver-processing: processes due waiver windows every WAIVER_CHECK_SECONDS

A failing tick is logged and the loop carries on.
"""

import logging
import threading
from typing import Callable, List

from . import config
from .league.league_context import LeagueContext

logger = logging.getLogger(__name__)


class ClockThread(threading.Thread):
    """Calls a job at a fixed interval until stopped."""

    def __init__(self, interval: float, job: Callable[[], object], name: str):
        super().__init__(name=name, daemon=True)
        self.interval = interval
        self.job = job
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.job()
            except Exception as e:
                logger.error(f"Clock job {self.name} failed: {e}", exc_info=True)
            self._stop_event.wait(self.interval)

    def stop(self) -> None:
        self._stop_event.set()


class LeagueClock:
    """Runs the draft timer and waiver processing for one LeagueContext."""

    def __init__(
        self,
        context: LeagueContext,
        tick_seconds: float = config.CLOCK_TICK_SECONDS,
        waiver_check_seconds: float = config.WAIVER_CHECK_SECONDS
    ):
        self.context = context
        self.tick_seconds = tick_seconds
        self.waiver_check_seconds = waiver_check_seconds
        self._threads: List[ClockThread] = []

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def tick_draft(self) -> bool:
        return self.context.draft.tick()

    def process_waivers(self) -> int:
        return len(self.context.waivers.process_due())

    def start(self) -> None:
        if self._threads:
            logger.debug("League clock already running")
            return
        self._threads = [
            ClockThread(self.tick_seconds, self.tick_draft, "draft-clock"),
            ClockThread(self.waiver_check_seconds, self.process_waivers, "waiver-processing"),
        ]
        for thread in self._threads:
            thread.start()
        logger.info(
            f"League clock started (draft tick {self.tick_seconds}s, "
            f"waiver check {self.waiver_check_seconds}s)"
        )

    def stop(self, timeout: float = 1.0) -> None:
        for thread in self._threads:
            thread.stop()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads = []
        logger.info("League clock stopped")
