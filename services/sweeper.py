"""
Timeout sweeper - background thread that periodically auto-verifies stale orders
"""
import logging
import threading
from typing import Any, Dict, List

from .order_service import OrderService

logger = logging.getLogger(__name__)


class TimeoutSweeper:
    """Runs OrderService.sweep_timeouts on a fixed interval.

    - interval_seconds: pause between sweeps
    - the thread is a daemon; stop() ends it and optionally joins
    """

    def __init__(self, order_service: OrderService, interval_seconds: float = 5.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.order_service = order_service
        self.interval_seconds = interval_seconds
        self.sweeps = 0
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._run, name="order-timeout-sweeper", daemon=True)

    def start(self) -> None:
        self._thread.start()
        logger.info("Timeout sweeper started (every %.1fs)", self.interval_seconds)

    def stop(self, join: bool = True) -> None:
        self._stop_event.set()
        if join and self._thread.is_alive():
            self._thread.join()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def run_once(self) -> List[str]:
        moved = self.order_service.sweep_timeouts()
        self.sweeps += 1
        return moved

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.is_alive(),
            "interval_seconds": self.interval_seconds,
            "sweeps": self.sweeps,
        }

    def _run(self) -> None:
        # wait() doubles as the sleep so stop() interrupts it immediately
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                # A failed sweep must not kill the thread; the next tick retries
                logger.exception("Timeout sweep failed")
