from __future__ import annotations

import threading
from typing import Callable, Optional

import structlog

logger = structlog.get_logger()


class RefreshService:
    """Runs the ingestion job on a fixed interval in a daemon thread.

    A failed run is logged and retried at the next tick.
    """

    def __init__(self, job: Callable[[], object], interval_s: float, run_immediately: bool = True):
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self.job = job
        self.interval_s = interval_s
        self.run_immediately = run_immediately
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> bool:
        try:
            self.job()
        except Exception as e:
            logger.exception("refresh_failed", error=str(e))
            return False
        return True

    def run(self) -> None:
        """Blocking loop until `stop()` is called."""
        if self.run_immediately:
            self.run_once()
        while not self._stop.wait(self.interval_s):
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="meteo-refresh", daemon=True)
        self._thread.start()
        logger.info("refresh_scheduled", interval_s=self.interval_s)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
