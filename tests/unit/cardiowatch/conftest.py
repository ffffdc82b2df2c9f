"""Shared fixtures for monitor tests."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from cardiowatch.config import AppConfig, SimulatorConfig
from cardiowatch.services.clock import ManualClock
from cardiowatch.services.monitor import Monitor

T0 = datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)


class RecordingNotifier:
    """Test double that implements the Notifier protocol."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str, str]] = []

    def info(self, title: str, message: str) -> None:
        self.messages.append(("info", title, message))

    def warning(self, title: str, message: str) -> None:
        self.messages.append(("warning", title, message))

    def levels(self) -> list[str]:
        return [level for level, _, _ in self.messages]


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def steady_config() -> AppConfig:
    """Configuration whose simulated RR never moves on its own."""
    return AppConfig(
        simulator=SimulatorConfig(seed=7, drift_probability=0.0, excursion_probability=0.0)
    )


@pytest.fixture
def monitor(steady_config: AppConfig, clock: ManualClock, notifier: RecordingNotifier) -> Monitor:
    return Monitor(config=steady_config, clock=clock, notifier=notifier)


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def run_ticks(clock: ManualClock) -> Callable[[Monitor, float], None]:
    """Tick a monitor every 50 ms of scripted time for the given number of seconds."""

    def _run(monitor: Monitor, seconds: float) -> None:
        for _ in range(round(seconds * 1000 / 50)):
            clock.advance(milliseconds=50)
            monitor.tick()

    return _run
