"""
Thread-safe sliding-window throttle for outbound Flattrade calls.

Usage
-----
    from core.rate_limiter import rate_limited

    @rate_limited(max_calls=10, period=1.0)
    def post_to_flattrade(...): ...

One limiter instance is shared by every function it decorates, so a
single budget can be applied across several endpoints of the same host.
"""

import time
import threading
import functools
from collections import deque
from typing import Callable


class _RateLimiter:
    """Keeps the timestamps of the last `max_calls` calls inside `period`."""

    def __init__(self, max_calls: int, period: float, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if max_calls < 1:
            raise ValueError("max_calls must be >= 1")
        self.max_calls = max_calls
        self.period    = period
        self._clock    = clock
        self._sleep    = sleep
        self._lock     = threading.Lock()
        self._calls: deque[float] = deque()

    def acquire(self) -> float:
        """Block until a call slot is free; return seconds spent waiting."""
        waited = 0.0
        with self._lock:
            now = self._clock()
            while self._calls and now - self._calls[0] >= self.period:
                self._calls.popleft()
            if len(self._calls) >= self.max_calls:
                waited = self.period - (now - self._calls[0])
                if waited > 0:
                    self._sleep(waited)
                self._calls.popleft()
            self._calls.append(self._clock())
        return waited

    def __call__(self, func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            self.acquire()
            return func(*args, **kwargs)
        wrapper.limiter = self
        return wrapper


def rate_limited(max_calls: int = 10, period: float = 1.0) -> _RateLimiter:
    """Decorator factory — wraps a function with rate-limiting."""
    return _RateLimiter(max_calls, period)
