"""
medtriage/context/scheduler.py
Background timers: idle-context sweep and feedback aggregation.

Each task is a daemon thread waiting on an Event for its interval, so
stop() returns promptly. Tasks talk to the stores through their public
methods only. A failing tick is logged and the loop keeps going.
"""

import logging
import threading
from typing import Callable, List, Optional

from medtriage.context.feedback import FeedbackStore, analyze_feedback
from medtriage.context.store import ContextStore

logger = logging.getLogger(__name__)

SWEEP_INTERVAL_SECONDS    = 15 * 60
FEEDBACK_INTERVAL_SECONDS = 24 * 60 * 60


class PeriodicTask:

    def __init__(self, name: str, interval_seconds: float, fn: Callable[[], object]):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name             = name
        self.interval_seconds = interval_seconds
        self._fn      = fn
        self._stop    = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.runs     = 0

    def run_once(self) -> None:
        try:
            self._fn()
        except Exception as e:
            logger.error(f"Periodic task {self.name} failed: {e}", exc_info=True)
        finally:
            self.runs += 1

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            self.run_once()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"Started {self.name} every {self.interval_seconds}s")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())


class BackgroundScheduler:
    """Owns the sweep and feedback-aggregation tasks for one process."""

    def __init__(
        self,
        context_store:     ContextStore,
        feedback_store:    FeedbackStore,
        sweep_interval:    float = SWEEP_INTERVAL_SECONDS,
        feedback_interval: float = FEEDBACK_INTERVAL_SECONDS,
    ):
        self.tasks: List[PeriodicTask] = [
            PeriodicTask('context-sweep', sweep_interval, context_store.sweep),
            PeriodicTask('feedback-aggregation', feedback_interval,
                         lambda: analyze_feedback(feedback_store)),
        ]

    def start(self) -> None:
        for task in self.tasks:
            task.start()
        logger.info("Background scheduler started")

    def stop(self) -> None:
        for task in self.tasks:
            task.stop()
        logger.info("Background scheduler stopped")

    @property
    def running(self) -> bool:
        return any(t.running for t in self.tasks)
