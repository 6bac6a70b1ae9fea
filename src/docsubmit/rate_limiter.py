"""Sliding-window rate limiting for document submissions."""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque

from .errors import Cancelled, InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Window:
    """At most ``capacity`` admissions within any ``duration`` seconds."""

    capacity: int
    duration: float = 1.0

    def __post_init__(self) -> None:
        if isinstance(self.capacity, bool) or not isinstance(self.capacity, int):
            raise InvalidConfiguration(
                f"capacity must be an integer, got {self.capacity!r}"
            )
        if self.capacity <= 0:
            raise InvalidConfiguration("capacity must be positive")
        if isinstance(self.duration, bool) or not isinstance(self.duration, (int, float)):
            raise InvalidConfiguration(
                f"window duration must be a number of seconds, got {self.duration!r}"
            )
        if not math.isfinite(self.duration) or self.duration <= 0:
            raise InvalidConfiguration("window duration must be positive")


class CancelToken:
    """
    Cooperative cancellation for callers blocked in :meth:`SlidingWindowRateLimiter.acquire`.

    Threads cannot be interrupted from the outside, so a waiter is handed a
    token instead. Calling :meth:`cancel` marks the token and runs its
    callbacks, which wake every limiter currently waiting on its behalf;
    those waiters raise :class:`~docsubmit.errors.Cancelled` without
    recording an admission.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel every current and future wait that uses this token."""
        with self._lock:
            self._event.set()
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation, right away if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)


class SlidingWindowRateLimiter:
    """Thread-safe sliding-window limiter that blocks callers over the limit."""

    def __init__(
        self,
        capacity: int,
        window_seconds: float = 1.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            capacity: Maximum number of admissions within one window
            window_seconds: Length of the sliding window in seconds
            clock: Monotonic time source in seconds (default: time.monotonic)

        Raises:
            InvalidConfiguration: If capacity or window_seconds is not positive
        """
        self._window = Window(capacity, window_seconds)
        self._clock = clock
        self._timestamps: Deque[float] = deque()
        self._condition = threading.Condition(threading.Lock())

    @classmethod
    def from_window(
        cls, window: Window, *, clock: Callable[[], float] = time.monotonic
    ) -> "SlidingWindowRateLimiter":
        return cls(window.capacity, window.duration, clock=clock)

    @property
    def window(self) -> Window:
        return self._window

    def acquire(self, cancel: CancelToken | None = None) -> float:
        """
        Block until an admission is allowed and record it.

        Every wake-up, whether it comes from the wait timing out, from
        :meth:`notify_waiters` or from a spurious wake, re-runs the whole
        check; nothing is assumed about why the wait ended.

        Args:
            cancel: Optional token that aborts the wait when cancelled

        Returns:
            The clock reading recorded for this admission

        Raises:
            Cancelled: If ``cancel`` is cancelled before a permit is granted
        """
        duration = self._window.duration
        if cancel is not None:
            cancel.add_callback(self.notify_waiters)
        try:
            with self._condition:
                while True:
                    if cancel is not None and cancel.cancelled:
                        raise Cancelled("Cancelled while waiting for a rate-limit permit")

                    now = self._clock()
                    self._prune(now)

                    if len(self._timestamps) < self._window.capacity:
                        self._timestamps.append(now)
                        return now

                    wait = (self._timestamps[0] + duration) - now
                    if wait <= 0:
                        continue

                    logger.debug(
                        "Rate limit of %d per %.3fs reached, waiting up to %.3fs",
                        self._window.capacity,
                        duration,
                        wait,
                    )
                    self._condition.wait(wait)
        finally:
            if cancel is not None:
                cancel.remove_callback(self.notify_waiters)

    def notify_waiters(self) -> None:
        """Wake all blocked callers so they re-evaluate the window now."""
        with self._condition:
            self._condition.notify_all()

    def available(self) -> int:
        """Return how many admissions would be granted right now without waiting."""
        with self._condition:
            self._prune(self._clock())
            return self._window.capacity - len(self._timestamps)

    def snapshot(self) -> tuple[float, ...]:
        """Return the recorded admission times, oldest first, without pruning."""
        with self._condition:
            return tuple(self._timestamps)

    def _prune(self, now: float) -> None:
        # Caller holds the condition lock; entries are time-ordered so expired
        # ones always form a prefix.
        duration = self._window.duration
        while self._timestamps and self._timestamps[0] + duration <= now:
            self._timestamps.popleft()
