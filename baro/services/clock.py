# baro/services/clock.py

"""Millisecond wall clock used for cache stamps and response timing."""

import time
from typing import Protocol


class Clock(Protocol):
    """Source of epoch-millisecond timestamps."""

    def now(self) -> int: ...


class SystemClock:
    """Clock backed by :func:`time.time`."""

    def now(self) -> int:
        return int(time.time() * 1000)
