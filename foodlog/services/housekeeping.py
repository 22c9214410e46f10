"""
Housekeeping

Daily purge of all food logs, run on a background timer.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

from foodlog.services.food_log_service import clear_food_logs
from foodlog.utils.clock import utcnow

logger = logging.getLogger(__name__)


def seconds_until(hour_utc: int, now: Optional[datetime] = None) -> float:
    """Seconds from ``now`` until the next ``hour_utc``:00 UTC."""
    now = now or utcnow()
    target = now.replace(hour=hour_utc, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


class PurgeScheduler:
    def __init__(self, app, hour_utc: int = 0):
        if not 0 <= hour_utc <= 23:
            raise ValueError("hour_utc must be between 0 and 23")
        self.app = app
        self.hour_utc = hour_utc
        self._timer: Optional[threading.Timer] = None
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stopped = True

    @property
    def running(self) -> bool:
        return not self._stopped

    def start(self) -> None:
        with self._state_lock:
            if not self._stopped:
                return
            self._stopped = False
            self._schedule_next()
        logger.info("Food logs will be cleared daily at %02d:00 UTC", self.hour_utc)

    def stop(self) -> None:
        with self._state_lock:
            self._stopped = True
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _schedule_next(self) -> None:
        timer = threading.Timer(seconds_until(self.hour_utc), self._tick)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self) -> None:
        try:
            self.run_once()
        finally:
            with self._state_lock:
                if not self._stopped:
                    self._schedule_next()

    def run_once(self) -> Optional[int]:
        """Clear all logs now. Returns None if a purge is already in progress."""
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Scheduled food log purge skipped: previous run still in progress")
            return None
        try:
            with self.app.app_context():
                deleted = clear_food_logs()
            logger.info("Scheduled food log purge removed %d rows", deleted)
            return deleted
        except Exception:
            logger.exception("Scheduled food log purge failed")
            return None
        finally:
            self._run_lock.release()
