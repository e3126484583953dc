import logging
import threading
from datetime import date, datetime
from models.batch_result import BatchResult
from services.recurring_service import RecurringService

logger = logging.getLogger(__name__)

# Shared by every runner in the process.
_scan_lock = threading.Lock()


class ScanRunner:
    """Runs the due-expense scan on demand and, optionally, on a timer.

    All runners, manual and periodic, share one process-wide lock, so two
    scans never overlap and the same due cycle cannot be materialized twice.
    """

    def __init__(self, recurring_service: RecurringService, interval_seconds: float = 3600.0):
        self._recurring = recurring_service
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.last_result: BatchResult | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_now(self, now: date | datetime | None = None) -> BatchResult:
        with _scan_lock:
            result = self._recurring.run_scheduled_scan(now)
            self.last_result = result
            return result

    def start(self):
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="recurring-scan", daemon=True)
        self._thread.start()
        logger.info("Periodic recurring scan every %.0f seconds", self._interval)

    def stop(self, timeout: float | None = None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self):
        while not self._stop.wait(self._interval):
            try:
                self.run_now()
            except Exception:
                # A broken scan (e.g. DB unavailable) must not kill the timer thread.
                logger.exception("Periodic recurring scan failed")
