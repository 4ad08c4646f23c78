"""Debouncing of bursty calls.

This module provides:
- Debouncer: One pending timer per key, last call within the window wins
- debounce: Single-key convenience wrapper around a function
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Collapses repeated calls per key into one call after a quiet period."""

    def __init__(self, func: Callable[..., Any], delay_s: float) -> None:
        """Initialize the debouncer.

        Args:
            func: Function to invoke once a key has been quiet for delay_s.
            delay_s: Quiet period in seconds.
        """
        self._func = func
        self._delay_s = max(0.0, delay_s)
        self._timers: dict[Hashable, threading.Timer] = {}
        self._lock = threading.Lock()

    @property
    def delay_s(self) -> float:
        """Get the quiet period in seconds."""
        return self._delay_s

    @property
    def pending(self) -> int:
        """Number of keys with a call waiting to fire."""
        with self._lock:
            return len(self._timers)

    def schedule(self, key: Hashable, *args: Any) -> None:
        """Schedule func(*args), replacing any pending call for key."""
        with self._lock:
            timer = self._timers.get(key)
            if timer:
                timer.cancel()

            timer = threading.Timer(self._delay_s, self._fire, args=(key, args))
            timer.daemon = True
            self._timers[key] = timer
            timer.start()

    def _fire(self, key: Hashable, args: tuple[Any, ...]) -> None:
        with self._lock:
            # A newer schedule() may have replaced this timer
            if self._timers.get(key) is not threading.current_thread():
                return
            del self._timers[key]

        try:
            self._func(*args)
        except Exception:
            logger.exception(f"Debounced call for {key} failed")

    def cancel(self) -> None:
        """Drop every pending call."""
        with self._lock:
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()


def debounce(func: Callable[..., Any], delay_s: float) -> Callable[..., None]:
    """Wrap func so bursts of calls collapse into one call with the latest args."""
    debouncer = Debouncer(func, delay_s)

    def wrapper(*args: Any) -> None:
        debouncer.schedule(None, *args)

    return wrapper
