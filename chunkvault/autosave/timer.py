"""Background timer that triggers periodic flushes."""

import logging
from threading import Thread, Event
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AutoSaveTimer:
    """Calls a function every ``interval_seconds`` on a daemon thread."""

    def __init__(self, interval_seconds: float, callback: Callable[[], object], name: str = "AutoSaveTimer"):
        if interval_seconds <= 0:
            raise ValueError(f"Auto-save interval must be positive, got {interval_seconds}")
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.name = name

        self.timer_thread: Optional[Thread] = None
        self.stop_event = Event()

    @property
    def is_running(self) -> bool:
        return self.timer_thread is not None and self.timer_thread.is_alive()

    def start(self) -> None:
        """Start ticking. A no-op if already running."""
        if self.is_running:
            logger.debug("Auto-save timer already running")
            return

        self.stop_event = Event()
        self.timer_thread = Thread(target=self._run, args=(self.stop_event,), daemon=True)
        self.timer_thread.name = self.name
        self.timer_thread.start()
        logger.info(f"Auto-save timer started (interval: {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop ticking and wait for an in-flight tick to finish."""
        if self.timer_thread is None:
            return

        self.stop_event.set()
        self.timer_thread.join(timeout=timeout)
        if self.timer_thread.is_alive():
            logger.warning("Auto-save timer thread did not stop cleanly")
        self.timer_thread = None
        logger.info("Auto-save timer stopped")

    def _run(self, stop_event: Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Auto-save tick failed: {e}", exc_info=True)
