"""
Restock Scheduler — interval-driven background trigger for auto-restock.

``start()`` launches a daemon thread that runs one cycle per interval.
``stop()`` prevents further ticks; a cycle already running is left to finish.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from healx.schemas.restock import BatchReport, RestockRunOptions, SchedulerStatus
from healx.services.auto_restock_service import AutoRestockService

logger = logging.getLogger(__name__)


def describe_interval(seconds: int) -> str:
    if seconds % 3600 == 0:
        hours = seconds // 3600
        return "Every hour" if hours == 1 else f"Every {hours} hours"
    if seconds % 60 == 0:
        minutes = seconds // 60
        return "Every minute" if minutes == 1 else f"Every {minutes} minutes"
    return f"Every {seconds} seconds"


class RestockScheduler:

    def __init__(
        self,
        service: AutoRestockService,
        interval_seconds: int = 60,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        if interval_seconds < 1:
            raise ValueError("interval_seconds must be at least 1")
        self._service = service
        self._interval = interval_seconds
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()
        self._next_run_at: Optional[datetime] = None
        self._last_run_at: Optional[datetime] = None
        self._last_items_processed: Optional[int] = None
        self._last_error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        with self._state_lock:
            if self.is_running:
                logger.warning("restock_scheduler_already_running")
                return

            self._stop_event = threading.Event()
            self._next_run_at = self._clock() + timedelta(seconds=self._interval)
            self._thread = threading.Thread(
                target=self._run_loop,
                args=(self._stop_event,),
                name="restock-scheduler",
                daemon=True,
            )
            self._thread.start()
        logger.info("restock_scheduler_started interval_seconds=%s", self._interval)

    def stop(self) -> None:
        with self._state_lock:
            self._stop_event.set()
            self._thread = None
            self._next_run_at = None
        logger.info("restock_scheduler_stopped")

    def trigger(self, options: Optional[RestockRunOptions] = None) -> BatchReport:
        """Run a cycle now on the caller's thread; exceptions propagate."""
        return self._service.check_and_restock_items(options)

    def tick(self) -> Optional[BatchReport]:
        """Run one scheduled cycle, recording the outcome. Never raises."""
        run_at = self._clock()
        try:
            report = self._service.check_and_restock_items()
        except Exception as exc:  # noqa: BLE001
            logger.exception("restock_scheduler_tick_failed")
            with self._state_lock:
                self._last_run_at = run_at
                self._last_error = str(exc)
            return None

        with self._state_lock:
            self._last_run_at = run_at
            self._last_error = None
            if not report.skipped:
                self._last_items_processed = report.items_processed
        if report.items_processed > 0:
            logger.info("restock_scheduler_tick items_processed=%s", report.items_processed)
        else:
            logger.info("restock_scheduler_tick_idle message=%s", report.message)
        return report

    def get_status(self) -> SchedulerStatus:
        with self._state_lock:
            running = self.is_running
            return SchedulerStatus(
                is_running=running,
                schedule_period=describe_interval(self._interval),
                interval_seconds=self._interval,
                next_run_estimate=self._next_run_at if running else None,
                last_run_at=self._last_run_at,
                last_run_items_processed=self._last_items_processed,
                last_error=self._last_error,
            )

    def _run_loop(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(timeout=self._interval):
            try:
                self.tick()
            except Exception:  # noqa: BLE001
                logger.exception("restock_scheduler_loop_exception")
            with self._state_lock:
                if not stop_event.is_set():
                    self._next_run_at = self._clock() + timedelta(seconds=self._interval)
