"""
Bounded, newest-first event log.

Entries are shown to the operator and exported, so every append is also
mirrored to structlog for the service logs.
"""

from collections import deque
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from itertools import islice

import structlog

from cardiowatch.domain.models import LogEvent, LogKind

logger = structlog.get_logger(__name__)

DEFAULT_CAPACITY = 400


class EventLog:
    """Newest entry at index 0; the oldest entry is evicted past capacity."""

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._clock = clock or (lambda: datetime.now(UTC))
        # appendleft on a bounded deque discards from the right (oldest) end
        self._entries: deque[LogEvent] = deque(maxlen=capacity)
        self.logger = logger.bind(component="event_log")

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEvent]:
        return iter(self._entries)

    def append(self, kind: LogKind, message: str, timestamp: datetime | None = None) -> LogEvent:
        event = LogEvent(timestamp=timestamp or self._clock(), kind=kind, message=message)
        self._entries.appendleft(event)
        self.logger.info("monitor_event", kind=kind.value, message=message)
        return event

    def all(self) -> tuple[LogEvent, ...]:
        return tuple(self._entries)

    def recent(self, n: int) -> tuple[LogEvent, ...]:
        return tuple(islice(self._entries, max(n, 0)))

    def clear(self) -> None:
        self._entries.clear()
