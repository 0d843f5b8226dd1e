from __future__ import annotations

import random
import time
from typing import Optional

from scamcheck.core.cancellation import CancellationToken


def _sleep(seconds: float, cancel: Optional[CancellationToken]) -> None:
    if cancel is not None:
        cancel.sleep(seconds)
    elif seconds > 0:
        time.sleep(seconds)


class SimpleRateLimiter:
    def __init__(self, requests_per_sec: float) -> None:
        if requests_per_sec <= 0:
            raise ValueError("requests_per_sec must be > 0")
        self._min_interval = 1.0 / requests_per_sec
        self._last_ts = 0.0

    def wait(self, cancel: Optional[CancellationToken] = None) -> None:
        elapsed = time.monotonic() - self._last_ts
        _sleep(self._min_interval - elapsed, cancel)
        self._last_ts = time.monotonic()


def backoff_delay(attempt: int, base: float = 0.5, cap: float = 8.0) -> float:
    t = min(cap, base * (2 ** attempt))
    return t * (0.7 + random.random() * 0.6)


def backoff_sleep(attempt: int, cancel: Optional[CancellationToken] = None) -> None:
    _sleep(backoff_delay(attempt), cancel)
