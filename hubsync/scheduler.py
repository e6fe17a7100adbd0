"""Periodic refresh with debounced interval changes."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Protocol

from .constants import INTERVAL_DEBOUNCE_S, MAX_REFRESH_INTERVAL_S, MIN_REFRESH_INTERVAL_S
from .utils import clamp

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timers(Protocol):
    """Source of timers; swapped for a manual clock in tests."""

    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, fn: Callable[[], None]) -> TimerHandle: ...


class RepeatingTimer(threading.Thread):
    """Daemon thread calling fn every interval seconds until cancelled."""

    def __init__(self, interval: float, fn: Callable[[], None]) -> None:
        super().__init__(name="hubsync-poll", daemon=True)
        self.interval = interval
        self.fn = fn
        self.finished = threading.Event()

    def run(self) -> None:
        while not self.finished.wait(self.interval):
            try:
                self.fn()
            except Exception:
                logger.exception("Scheduled refresh failed")

    def cancel(self) -> None:
        self.finished.set()


class ThreadTimers:
    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, fn)
        timer.daemon = True
        timer.start()
        return timer

    def call_every(self, interval: float, fn: Callable[[], None]) -> TimerHandle:
        timer = RepeatingTimer(interval, fn)
        timer.start()
        return timer


def clamp_interval(interval_s: int) -> int:
    return clamp(int(interval_s), MIN_REFRESH_INTERVAL_S, MAX_REFRESH_INTERVAL_S)


class PollScheduler:
    """Calls refresh on a repeating timer.

    ``start`` always replaces the running timer, so there is never more than
    one. Interval changes arrive through ``interval_changed`` and are
    coalesced: only the last value within the debounce window restarts the
    timer, and only if the scheduler is running.
    """

    def __init__(
        self,
        refresh: Callable[[], None],
        *,
        timers: Timers | None = None,
        debounce_s: float = INTERVAL_DEBOUNCE_S,
    ) -> None:
        self.refresh = refresh
        self.timers = timers or ThreadTimers()
        self.debounce_s = debounce_s
        self._lock = threading.Lock()
        self._timer: TimerHandle | None = None
        self._pending_change: TimerHandle | None = None
        self._interval: int | None = None

    @property
    def running(self) -> bool:
        with self._lock:
            return self._timer is not None

    @property
    def interval(self) -> int | None:
        """Effective (clamped) interval, or None when stopped."""
        with self._lock:
            return self._interval if self._timer is not None else None

    def start(self, interval_s: int) -> None:
        with self._lock:
            self._arm(clamp_interval(interval_s))
        self.refresh()

    def _arm(self, interval: int) -> None:
        # caller holds the lock
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.timers.call_every(interval, self._tick)
        self._interval = interval
        logger.debug("Polling every %ss", interval)

    def stop(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._pending_change is not None:
                self._pending_change.cancel()
                self._pending_change = None

    def interval_changed(self, interval_s: int) -> None:
        with self._lock:
            if self._pending_change is not None:
                self._pending_change.cancel()
            self._pending_change = self.timers.call_later(
                self.debounce_s, lambda: self._apply_interval(interval_s)
            )

    def _apply_interval(self, interval_s: int) -> None:
        with self._lock:
            self._pending_change = None
            if self._timer is None:
                return
            # check and re-arm in one lock hold; a concurrent stop() must stick
            self._arm(clamp_interval(interval_s))
        self.refresh()

    def _tick(self) -> None:
        self.refresh()
