"""Wall-clock helpers measured in whole milliseconds."""

import time

__all__ = ["now_ms"]


def now_ms() -> int:
    """Return the current wall-clock time in whole milliseconds since the epoch."""
    return time.time_ns() // 1_000_000