"""Time helpers shared by the persistence and push layers."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone


class Clock:
    """Source of wall-clock time, monotonic time and sleeping.

    Push delivery and the fan-out scheduler take a clock instead of calling
    :mod:`time` directly so backoff and budget checks can be driven by a fake
    clock in tests.
    """

    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


system_clock = Clock()


def now_utc() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalize ``value`` so it is expressed in UTC.

    SQLite hands back naive datetimes; those are assumed to already be UTC.
    """

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def elapsed_ms(clock: Clock, started_at: float) -> int:
    """Return whole milliseconds elapsed since ``started_at`` on ``clock``."""

    return int((clock.monotonic() - started_at) * 1000)


__all__ = ["Clock", "system_clock", "now_utc", "ensure_utc", "elapsed_ms"]
