"""
Resettable periodic ticker.

Ticks missed while the consumer was busy coalesce into a single immediate
tick. reset() restarts the countdown so a new period applies from the next
tick, never retroactively.
"""

import threading
import time
from typing import Callable


class Ticker:
    """Periodic ticker with one blocking wait for 'next tick or stop'."""

    def __init__(self, period_seconds: float, clock: Callable[[], float] = time.monotonic):
        if period_seconds <= 0:
            raise ValueError(f"Ticker period must be positive, got {period_seconds}")
        self._cond = threading.Condition()
        self._clock = clock
        self._period = float(period_seconds)
        self._deadline = clock() + self._period
        self._stopped = False

    @property
    def period(self) -> float:
        return self._period

    @property
    def stopped(self) -> bool:
        return self._stopped

    def reset(self, period_seconds: float) -> None:
        if period_seconds <= 0:
            raise ValueError(f"Ticker period must be positive, got {period_seconds}")
        with self._cond:
            self._period = float(period_seconds)
            self._deadline = self._clock() + self._period
            self._cond.notify_all()

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    def wait(self) -> bool:
        """
        Block until the next tick.

        Returns:
            True on tick, False once the ticker is stopped
        """
        with self._cond:
            while True:
                if self._stopped:
                    return False
                now = self._clock()
                remaining = self._deadline - now
                if remaining <= 0:
                    self._deadline += self._period
                    if self._deadline <= now:
                        self._deadline = now + self._period
                    return True
                # Condition.wait overflows past TIMEOUT_MAX
                self._cond.wait(timeout=min(remaining, threading.TIMEOUT_MAX))
