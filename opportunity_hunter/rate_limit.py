# opportunity_hunter/rate_limit.py
from __future__ import annotations

import threading
import time
from typing import List, Optional, Protocol

from opportunity_hunter.exceptions import HuntCancelled


class Clock(Protocol):
    def now(self) -> float:
        """Monotonic seconds."""
        ...

    def sleep(self, seconds: float, cancel: Optional[threading.Event] = None) -> bool:
        """Sleep up to `seconds`. Returns False when woken by `cancel`."""
        ...


class SystemClock:
    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel: Optional[threading.Event] = None) -> bool:
        if seconds <= 0:
            return not (cancel is not None and cancel.is_set())
        if cancel is None:
            time.sleep(seconds)
            return True
        return not cancel.wait(seconds)


class ManualClock:
    """
    Virtual clock: sleeping advances time instantly and records the request.
    Used for deterministic tests.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    def sleep(self, seconds: float, cancel: Optional[threading.Event] = None) -> bool:
        if cancel is not None and cancel.is_set():
            return False
        self.sleeps.append(seconds)
        self._now += max(0.0, seconds)
        return True


class RateLimiter:
    """
    Leaky bucket: `burst` requests may go out back to back, after that one
    request per `interval_s`. `acquire` blocks the caller until a slot is free.
    """

    def __init__(self, interval_s: float, burst: int = 1, clock: Optional[Clock] = None):
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")
        if burst < 1:
            raise ValueError("burst must be >= 1")
        self.interval_s = interval_s
        self.burst = burst
        self.clock = clock or SystemClock()
        self._tokens = float(burst)
        self._last = self.clock.now()

    def _refill(self) -> None:
        now = self.clock.now()
        elapsed = max(0.0, now - self._last)
        self._last = now
        if self.interval_s == 0:
            self._tokens = float(self.burst)
        else:
            self._tokens = min(float(self.burst), self._tokens + elapsed / self.interval_s)

    def acquire(self, cancel: Optional[threading.Event] = None) -> None:
        if cancel is not None and cancel.is_set():
            raise HuntCancelled("cancelled before request slot was acquired")

        self._refill()
        while self._tokens < 1.0 - 1e-9:
            wait = (1.0 - self._tokens) * self.interval_s
            if not self.clock.sleep(wait, cancel):
                raise HuntCancelled("cancelled while waiting for request slot")
            self._refill()

        self._tokens -= 1.0
