from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..core.constants import DEFAULT_FINALIZATION_INTERVAL_MINUTES
from .orchestrator import DayResult, FinalizationOrchestrator

logger = logging.getLogger(__name__)

JOB_ID = "attendance-finalization"


class FinalizationScheduler:
    """Runs `finalize_day()` for today on a fixed interval."""

    def __init__(
        self,
        orchestrator: FinalizationOrchestrator,
        *,
        interval_minutes: int = DEFAULT_FINALIZATION_INTERVAL_MINUTES,
        timezone: Optional[str] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self._orchestrator = orchestrator
        self._interval_minutes = int(interval_minutes)
        if scheduler is None:
            options = {
                "job_defaults": {
                    "coalesce": True,
                    "max_instances": 1,
                    "misfire_grace_time": self._interval_minutes * 60,
                }
            }
            if timezone:
                options["timezone"] = timezone
            scheduler = BackgroundScheduler(**options)
        self._scheduler = scheduler

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def start(self) -> None:
        if self.running:
            return
        self._scheduler.add_job(
            self.run_once,
            "interval",
            minutes=self._interval_minutes,
            id=JOB_ID,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Attendance finalization scheduled every %d minute(s)", self._interval_minutes)

    def stop(self) -> None:
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        logger.info("Attendance finalization scheduler stopped")

    def run_once(self) -> Optional[DayResult]:
        """One scheduled tick; failures are logged so the next tick still runs."""
        try:
            return self._orchestrator.finalize_day()
        except Exception:
            logger.exception("Scheduled attendance finalization failed")
            return None
