"""
Background scheduler for the auto-confirmation sweep (APScheduler based).

The scheduler is an explicit object with its own lifecycle: start() registers
the interval job and starts the worker thread, stop() is the cancellation
signal. FastAPI starts and stops it from its startup/shutdown hooks.

Usage:
    scheduler = AutoConfirmScheduler(engine)
    scheduler.start()
    ...
    scheduler.stop()
"""

from __future__ import annotations

from typing import Optional

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.engine import Engine

from stay_booking.config import AUTO_CONFIRM_INTERVAL_SECONDS
from stay_booking.services.auto_confirm import run_auto_confirm_sweep

logger = structlog.get_logger(__name__)

JOB_ID = "auto_confirm_sweep"


class AutoConfirmScheduler:
    """Runs run_auto_confirm_sweep() every `interval_seconds` on a background thread."""

    def __init__(self, engine: Engine, interval_seconds: int = AUTO_CONFIRM_INTERVAL_SECONDS):
        self.engine = engine
        self.interval_seconds = interval_seconds
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> None:
        """Job body; a failing pass is logged and the next interval still runs."""
        try:
            run_auto_confirm_sweep(self.engine)
        except Exception as e:
            logger.exception("auto_confirm_pass_failed", error=str(e))

    def start(self) -> None:
        if self.running:
            logger.warning("auto_confirm_scheduler_already_running")
            return

        scheduler = BackgroundScheduler(timezone="UTC")
        scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="Auto-confirm stale pending reservations",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler

        logger.info("auto_confirm_scheduler_started", interval_seconds=self.interval_seconds)

    def stop(self, wait: bool = True) -> None:
        if self._scheduler is None:
            return

        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("auto_confirm_scheduler_stopped")
