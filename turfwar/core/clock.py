"""Источник времени: UTC в миллисекундах (инжектируется для детерминизма)."""

import time
from typing import Callable

Clock = Callable[[], int]


def now_utc_ms() -> int:
    return time.time_ns() // 1_000_000
