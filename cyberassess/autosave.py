"""Debounced auto-save."""

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

_NOTHING = object()


class Debouncer:
    """
    Coalesce rapid ``trigger(value)`` calls into one ``callback(value)``.

    Each trigger restarts a ``wait``-second timer; when it fires the callback
    runs once with the latest value. ``flush()`` runs a pending call now and
    ``cancel()`` drops it. Callback runs never overlap, and ``flush()`` waits
    for a timer run that is already in progress.
    """

    def __init__(self, callback: Callable[[Any], Any], wait: float = 1.5):
        self._callback = callback
        self._wait = max(0.0, float(wait))
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Any = _NOTHING
        self._running = False

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not _NOTHING

    def trigger(self, value: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = value
            timer = threading.Timer(self._wait, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _take(self, running=False):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            value, self._pending = self._pending, _NOTHING
            if running and value is not _NOTHING:
                self._running = True
            return value

    def _fire(self) -> None:
        with self._run_lock:
            value = self._take(running=True)
            if value is _NOTHING:
                return
            try:
                self._callback(value)
            except Exception:
                # Timer thread: nobody is left to catch it.
                logger.exception("Auto-save failed")
            finally:
                with self._lock:
                    self._running = False

    def flush(self) -> bool:
        """
        Run the pending call now. Returns False when nothing was pending and
        no timer save was in flight.
        """
        with self._lock:
            in_flight = self._running
        with self._run_lock:
            value = self._take()
            if value is _NOTHING:
                return in_flight
            self._callback(value)
            return True

    def cancel(self) -> None:
        self._take()
