"""
Time sources for the monitor.

The state machine never reads the wall clock itself: every operation receives
`now` from a clock so tests and demos can script time.
"""

from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything callable that returns the current (timezone-aware) time."""

    def __call__(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def __call__(self) -> datetime:
        return datetime.now(UTC)


class ManualClock:
    """Scripted clock. Time only moves when advanced."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self._now

    def advance(self, seconds: float = 0.0, milliseconds: float = 0.0) -> datetime:
        self._now += timedelta(seconds=seconds, milliseconds=milliseconds)
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now
