"""Rolling time window of recent samples."""

from collections import deque
from collections.abc import Iterator
from datetime import datetime, timedelta

from cardiowatch.domain.models import Sample


class RingBuffer:
    """
    Holds samples in arrival order, trimmed from the head by age.

    Samples are assumed to arrive with non-decreasing timestamps, so trimming
    only ever has to look at the head.
    """

    def __init__(self) -> None:
        self._samples: deque[Sample] = deque()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

    def append(self, sample: Sample) -> None:
        self._samples.append(sample)

    def trim(self, keep_sec: float, now: datetime) -> int:
        """Drop samples older than `now - keep_sec`. Returns the number evicted."""
        cutoff = now - timedelta(seconds=keep_sec)
        evicted = 0
        while self._samples and self._samples[0].timestamp < cutoff:
            self._samples.popleft()
            evicted += 1
        return evicted

    def extract_last_seconds(self, sec: float, now: datetime) -> list[Sample]:
        """Copy of the samples no older than `now - sec`, oldest first."""
        cutoff = now - timedelta(seconds=sec)
        return [s for s in self._samples if s.timestamp >= cutoff]

    def latest(self) -> Sample | None:
        return self._samples[-1] if self._samples else None

    def clear(self) -> None:
        self._samples.clear()
