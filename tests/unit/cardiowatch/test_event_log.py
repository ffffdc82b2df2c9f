"""Tests for the bounded newest-first event log."""

from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from cardiowatch.domain.models import LogKind
from cardiowatch.services.clock import ManualClock
from cardiowatch.services.event_log import EventLog

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def test_newest_entry_first() -> None:
    clock = ManualClock(T0)
    log = EventLog(clock=clock)

    log.append(LogKind.STREAM_START, "first")
    clock.advance(seconds=1)
    log.append(LogKind.STREAM_STOP, "second")

    entries = log.all()
    assert [e.message for e in entries] == ["second", "first"]
    assert entries[0].timestamp == T0 + timedelta(seconds=1)


def test_explicit_timestamp_wins() -> None:
    log = EventLog(clock=ManualClock(T0))
    stamp = T0 + timedelta(minutes=5)
    assert log.append(LogKind.RESET, "x", timestamp=stamp).timestamp == stamp


def test_401st_entry_evicts_oldest() -> None:
    log = EventLog(clock=ManualClock(T0))
    for i in range(401):
        log.append(LogKind.CALL, str(i))

    entries = log.all()
    assert len(entries) == 400
    assert entries[0].message == "400"
    assert entries[-1].message == "1"
    assert "0" not in {e.message for e in entries}


@settings(max_examples=25)
@given(count=st.integers(min_value=0, max_value=900))
def test_never_exceeds_capacity(count: int) -> None:
    log = EventLog(clock=ManualClock(T0))
    for i in range(count):
        log.append(LogKind.CALL, str(i))
    assert len(log) == min(count, 400)


def test_all_is_read_only_snapshot() -> None:
    log = EventLog(clock=ManualClock(T0))
    log.append(LogKind.RESET, "Reset to normal")

    snapshot = log.all()
    assert isinstance(snapshot, tuple)
    log.append(LogKind.RESET, "again")
    assert len(snapshot) == 1


def test_recent() -> None:
    log = EventLog(capacity=10, clock=ManualClock(T0))
    for i in range(5):
        log.append(LogKind.CALL, str(i))
    assert [e.message for e in log.recent(3)] == ["4", "3", "2"]
    assert len(log.recent(50)) == 5


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        EventLog(capacity=0)
