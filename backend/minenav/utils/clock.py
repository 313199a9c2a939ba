from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable


Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_millis(dt: datetime) -> int:
    return (dt - EPOCH) // timedelta(milliseconds=1)


def iso_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a trailing Z, e.g. 2024-05-01T09:30:00.123Z."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_date(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).date().isoformat()
