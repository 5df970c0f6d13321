"""Wall-clock source for journal timestamps."""

import time
from typing import Callable

Clock = Callable[[], int]


def current_time_millis() -> int:
    """Return the current time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000
