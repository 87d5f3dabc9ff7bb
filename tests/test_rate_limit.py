import threading

import pytest

from opportunity_hunter.exceptions import HuntCancelled
from opportunity_hunter.rate_limit import ManualClock, RateLimiter, SystemClock


def test_requests_are_spaced_by_interval():
    clock = ManualClock()
    limiter = RateLimiter(2.0, clock=clock)

    for _ in range(4):
        limiter.acquire()

    assert clock.sleeps == [2.0, 2.0, 2.0]
    assert clock.now() == 6.0


def test_elapsed_time_counts_towards_the_next_slot():
    clock = ManualClock()
    limiter = RateLimiter(1.0, clock=clock)

    limiter.acquire()
    clock.advance(0.75)
    limiter.acquire()

    assert clock.sleeps == [pytest.approx(0.25)]


def test_burst_allows_back_to_back_requests():
    clock = ManualClock()
    limiter = RateLimiter(1.0, burst=3, clock=clock)

    for _ in range(3):
        limiter.acquire()
    assert clock.sleeps == []

    limiter.acquire()
    assert clock.sleeps == [1.0]


def test_zero_interval_never_waits():
    clock = ManualClock()
    limiter = RateLimiter(0.0, clock=clock)
    for _ in range(10):
        limiter.acquire()
    assert clock.sleeps == []


def test_cancel_before_acquire():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(HuntCancelled):
        RateLimiter(1.0, clock=ManualClock()).acquire(cancel)


def test_cancel_interrupts_wait():
    clock = ManualClock()
    limiter = RateLimiter(5.0, clock=clock)
    cancel = threading.Event()

    limiter.acquire(cancel)
    cancel.set()
    with pytest.raises(HuntCancelled):
        limiter.acquire(cancel)
    assert clock.sleeps == []


def test_system_clock_wakes_on_cancel():
    cancel = threading.Event()
    cancel.set()
    assert SystemClock().sleep(30.0, cancel) is False
    assert SystemClock().sleep(0.0) is True


def test_invalid_arguments():
    with pytest.raises(ValueError):
        RateLimiter(-1.0)
    with pytest.raises(ValueError):
        RateLimiter(1.0, burst=0)
