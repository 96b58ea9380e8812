"""Periodic capture re-arm for sessions whose capture dies without an end event."""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Watchdog:
    """
    Call ``tick`` every ``interval_s`` seconds on a background thread.

    Usage:
        watchdog = Watchdog(session.watchdog_tick, interval_s=10.0)
        watchdog.start()
        ...
        watchdog.stop()
    """

    def __init__(self, tick: Callable[[], object], interval_s: float = 10.0):
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self._tick = tick
        self.interval_s = interval_s
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, daemon=True, name="CaptureWatchdog")
        self._thread.start()
        logger.debug("Watchdog started (%.1fs interval)", self.interval_s)

    def stop(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval_s + 1)
        self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_s):
            try:
                if self._tick():
                    logger.info("Watchdog re-armed capture")
            except Exception:
                logger.exception("Watchdog tick failed")
