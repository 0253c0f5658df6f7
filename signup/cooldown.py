"""
Resend cooldown timer

Counts down once per tick on a background thread. The timer is owned by the
verification step: it is created when the step is entered and cancelled on
every way out of it, so no countdown thread outlives the step.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ResendCooldown:
    """Background countdown that disables resend while it is running"""

    def __init__(self, tick_seconds: float = 1.0, on_tick: Callable[[int], None] = None):
        self.tick_seconds = tick_seconds
        self.on_tick = on_tick
        self._remaining = 0
        self._lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def remaining(self) -> int:
        with self._lock:
            return self._remaining

    @property
    def is_active(self) -> bool:
        return self.remaining > 0

    def start(self, seconds: int):
        """Start (or restart) the countdown from the given number of seconds"""
        self.cancel()

        with self._lock:
            self._remaining = seconds
        if seconds <= 0:
            return

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(stop_event,),
            name="resend-cooldown",
            daemon=True
        )
        self._thread.start()
        logger.debug(f"Resend cooldown started for {seconds}s")

    def tick(self) -> int:
        """Decrement by one second and return what is left"""
        with self._lock:
            if self._remaining > 0:
                self._remaining -= 1
            remaining = self._remaining

        if self.on_tick:
            self.on_tick(remaining)
        return remaining

    def cancel(self):
        """Stop the countdown thread and clear the remaining time"""
        if self._stop_event:
            self._stop_event.set()

        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=5)

        self._stop_event = None
        self._thread = None
        with self._lock:
            self._remaining = 0

    def _run(self, stop_event: threading.Event):
        while not stop_event.wait(self.tick_seconds):
            if self.tick() <= 0:
                break
