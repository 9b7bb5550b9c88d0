# ABOUTME: Clock capability used for every stored timestamp.
# ABOUTME: Vault timestamps are unix milliseconds; backup stamps are timezone-aware UTC.

import time
from collections.abc import Callable
from datetime import UTC, datetime

MillisClock = Callable[[], int]
UtcClock = Callable[[], datetime]


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def utc_now() -> datetime:
    return datetime.now(UTC)
