"""Quiescence-window debouncing for the global filter input.

Debouncing only delays work: the last submitted value always wins, so the
final filter result is the same as filtering on every keystroke.
"""

from __future__ import annotations

import threading

from collections.abc import Callable
from typing import Any

from .log import debug, warn


class Debouncer:
    """Call ``callback`` with the last submitted value once input goes quiet.

    Every ``submit`` restarts the window; the callback runs on a timer
    thread ``delay_ms`` after the last submission.
    """

    def __init__(self, callback: Callable[[Any], Any], delay_ms: int = 300) -> None:
        """Initialize the debouncer.

        Parameters
        ----------
        callback : Callable[[Any], Any]
            Receives the last submitted value.
        delay_ms : int, optional
            Quiescence window in milliseconds.
        """
        self._callback = callback
        self._delay_ms = max(0, delay_ms)
        self._timer: threading.Timer | None = None
        self._pending: Any = None
        self._has_pending = False
        self._lock = threading.Lock()

    @property
    def delay_ms(self) -> int:
        """Get the debounce window in milliseconds."""
        return self._delay_ms

    @property
    def pending(self) -> bool:
        """Whether a call is waiting for the window to close."""
        with self._lock:
            return self._has_pending

    def submit(self, value: Any) -> None:
        """Record ``value`` and restart the window."""
        with self._lock:
            self._pending = value
            self._has_pending = True

            # Cancel existing timer
            if self._timer:
                self._timer.cancel()

            self._timer = threading.Timer(self._delay_ms / 1000.0, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            if not self._has_pending:
                return
            value = self._pending
            self._pending = None
            self._has_pending = False
            self._timer = None

        debug(f"Debounce window closed, firing with {value!r}")
        try:
            self._callback(value)
        except Exception as e:
            warn(f"Error in debounced callback: {e}")

    def flush(self) -> None:
        """Fire the pending call now, if there is one."""
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
        self._fire()

    def cancel(self) -> None:
        """Drop the pending call without firing it."""
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
            self._pending = None
            self._has_pending = False
