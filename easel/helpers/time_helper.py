"""Time utility helpers."""

import time
from datetime import datetime, timezone


def now_ms() -> int:
    """
    Get current timestamp in milliseconds since epoch.

    Returns:
        Current time as integer milliseconds
    """
    return int(time.time() * 1000)


def now_s() -> float:
    """Get current timestamp in seconds since epoch."""
    return time.time()


def iso_from_s(ts: float) -> str:
    """Format an epoch-seconds timestamp as an ISO 8601 UTC string."""
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def iso_now() -> str:
    """Current UTC time as an ISO 8601 string."""
    return iso_from_s(now_s())
