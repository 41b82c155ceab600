from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_MINUTES = 5


class RefreshScheduler:
    """Runs ``callback`` every N minutes on a daemon thread.

    Only one schedule exists at a time; installing replaces the previous one.
    """

    def __init__(self, callback: Callable[[], Any], *, seconds_per_minute: float = 60.0):
        self.callback = callback
        self.seconds_per_minute = seconds_per_minute
        self.interval_minutes: Optional[int] = None
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def install(self, minutes: object = DEFAULT_MINUTES) -> str:
        try:
            minutes = int(minutes)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            minutes = DEFAULT_MINUTES
        if minutes < 1:
            minutes = DEFAULT_MINUTES

        self.remove()
        with self._lock:
            stop = threading.Event()
            thread = threading.Thread(
                target=self._run,
                args=(stop, minutes * self.seconds_per_minute),
                name="bonos-refresh",
                daemon=True,
            )
            self._stop, self._thread, self.interval_minutes = stop, thread, minutes
            thread.start()
        logger.info("Refresh trigger installed every %s min", minutes)
        return f"Trigger instalado cada {minutes} min."

    def remove(self) -> str:
        with self._lock:
            if self._stop is not None:
                self._stop.set()
            if self._thread is not None and self._thread is not threading.current_thread():
                self._thread.join(timeout=5)
            self._stop, self._thread, self.interval_minutes = None, None, None
        return "Triggers eliminados."

    def _run(self, stop: threading.Event, interval: float) -> None:
        while not stop.wait(interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Scheduled refresh failed")
