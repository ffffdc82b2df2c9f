"""
Monitor context object: the core API consumed by the presentation layer.

This combines the complete pipeline for one wearer:
1. Simulate the next RR interval
2. Buffer it in the rolling window
3. Evaluate it against the thresholds (episodes, clip capture, BLE warning)
4. Keep the event log and serve reports/exports on demand

All state lives on the Monitor instance owned by the caller. Every mutating
operation holds the same re-entrant lock, so external calls (threshold changes,
forced readings, exports) are serialized with the periodic tick.
"""

import threading
from datetime import datetime
from pathlib import Path

import structlog
from pydantic import ValidationError

from cardiowatch.config import AppConfig, get_config
from cardiowatch.domain.models import (
    EventWindowConfig,
    LogEvent,
    LogKind,
    MonitorState,
    Report,
    Sample,
    Thresholds,
    Transition,
    hr_from_rr,
)
from cardiowatch.domain.result import Result
from cardiowatch.errors import ConfigError, ExportError
from cardiowatch.services import export
from cardiowatch.services.clock import Clock, SystemClock
from cardiowatch.services.driver import TickDriver
from cardiowatch.services.episode_machine import AbnormalEpisodeStateMachine
from cardiowatch.services.event_log import EventLog
from cardiowatch.services.notifier import LoggingNotifier, NotificationLevel, Notifier, dispatch
from cardiowatch.services.ring_buffer import RingBuffer
from cardiowatch.services.simulator import SignalSimulator

logger = structlog.get_logger(__name__)


class Monitor:
    """
    Periodic RR-interval monitor.

    Design principles:
    - Explicit context: no module-level state, the caller owns the instance
    - Injected time: every operation reads `now` from the clock it was given
    - Injected presentation: dialogs and beeps go through the Notifier
    - Total tick path: tick() and evaluate() never raise
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        clock: Clock | None = None,
        notifier: Notifier | None = None,
        simulator: SignalSimulator | None = None,
    ) -> None:
        self.config = config or get_config()
        self.clock: Clock = clock or SystemClock()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.logger = logger.bind(component="monitor")
        self._lock = threading.RLock()

        self.simulator = simulator or SignalSimulator(self.config.simulator)
        self.ring = RingBuffer()
        self.event_log = EventLog(capacity=self.config.monitor.log_capacity, clock=self.clock)
        self.episodes = AbnormalEpisodeStateMachine(
            ring=self.ring,
            event_log=self.event_log,
            thresholds=self.config.thresholds.to_thresholds(),
            window=self.config.window.to_window(),
            connected=self.config.monitor.ble_connected,
        )
        self.driver = TickDriver(self.tick, self.config.monitor.tick_interval_ms / 1000)

    @property
    def running(self) -> bool:
        return self.driver.running

    def start(self) -> bool:
        """Start the periodic driver. Must be called from inside the event loop."""
        with self._lock:
            if not self.driver.start():
                return False
            self.event_log.append(
                LogKind.STREAM_START,
                f"RR->HR simulation started ({1000 // self.config.monitor.tick_interval_ms}Hz summary)",
            )
            return True

    def stop(self) -> bool:
        with self._lock:
            if not self.driver.stop():
                return False
            self.event_log.append(LogKind.STREAM_STOP, "Simulation stopped")
            return True

    def tick(self, now: datetime | None = None) -> Sample:
        """One driver step: simulate, buffer, trim, evaluate."""
        with self._lock:
            now = now or self.clock()
            rr_ms = self.simulator.tick()
            sample = Sample(timestamp=now, rr_ms=rr_ms)
            self.ring.append(sample)
            self.ring.trim(self.config.monitor.ring_keep_seconds, now)
            self._evaluate(now)
            return sample

    def evaluate(self, now: datetime | None = None) -> Transition:
        """Re-run the episode machine on the current reading without a new sample."""
        with self._lock:
            return self._evaluate(now or self.clock())

    def _evaluate(self, now: datetime) -> Transition:
        rr_ms = self.simulator.rr_ms
        hr_bpm = hr_from_rr(rr_ms)
        try:
            transition = self.episodes.evaluate(hr_bpm, rr_ms, now)
        except Exception as e:
            self.logger.exception("evaluate_failed", error=str(e), rr_ms=rr_ms)
            return Transition.NONE

        if transition is Transition.STARTED:
            dispatch(
                self.notifier,
                NotificationLevel.WARNING,
                "Abnormal heart rate",
                f"HR {hr_bpm} bpm outside "
                f"{self.episodes.thresholds.low_bpm}~{self.episodes.thresholds.high_bpm} bpm",
            )
        return transition

    def force_tachy(self) -> None:
        with self._lock:
            self.simulator.force_tachy()
            self._evaluate(self.clock())
            self.event_log.append(
                LogKind.FORCE_ABNORMAL, f"Forced tachy (RR={self.simulator.rr_ms}ms)"
            )

    def force_brady(self) -> None:
        with self._lock:
            self.simulator.force_brady()
            self._evaluate(self.clock())
            self.event_log.append(
                LogKind.FORCE_ABNORMAL, f"Forced brady (RR={self.simulator.rr_ms}ms)"
            )

    def reset(self) -> None:
        """Back to a resting reading with no episode, pending warning or clip."""
        with self._lock:
            self.simulator.reset()
            self.episodes.reset()
            self.event_log.append(LogKind.RESET, "Reset to normal")

    def set_thresholds(self, low_bpm: int, high_bpm: int) -> None:
        """Replace the bounds and re-evaluate the current reading immediately."""
        with self._lock:
            try:
                thresholds = Thresholds(low_bpm=low_bpm, high_bpm=high_bpm)
            except ValidationError as e:
                raise ConfigError(f"Invalid thresholds low={low_bpm} high={high_bpm}: {e}") from e

            previous = self.episodes.thresholds
            self.episodes.thresholds = thresholds
            if thresholds.low_bpm != previous.low_bpm:
                self.event_log.append(LogKind.THRESHOLD_LOW_SET, f"low={thresholds.low_bpm}")
            if thresholds.high_bpm != previous.high_bpm:
                self.event_log.append(LogKind.THRESHOLD_HIGH_SET, f"high={thresholds.high_bpm}")
            self._evaluate(self.clock())

    def set_window(self, pre_sec: int, post_sec: int) -> None:
        with self._lock:
            try:
                window = EventWindowConfig(pre_sec=pre_sec, post_sec=post_sec)
            except ValidationError as e:
                raise ConfigError(f"Invalid event window pre={pre_sec} post={post_sec}: {e}") from e

            previous = self.episodes.window
            self.episodes.window = window
            if window.pre_sec != previous.pre_sec:
                self.event_log.append(LogKind.WINDOW_PRE_SET, f"preSec={window.pre_sec}")
            if window.post_sec != previous.post_sec:
                self.event_log.append(LogKind.WINDOW_POST_SET, f"postSec={window.post_sec}")

    def set_connected(self, connected: bool) -> None:
        with self._lock:
            if connected == self.episodes.connected:
                return
            self.episodes.connected = connected
            self.event_log.append(LogKind.BLE_TOGGLE, f"connected={str(connected).lower()}")

    @property
    def thresholds(self) -> Thresholds:
        return self.episodes.thresholds

    @property
    def window(self) -> EventWindowConfig:
        return self.episodes.window

    @property
    def connected(self) -> bool:
        return self.episodes.connected

    def current_state(self) -> MonitorState:
        with self._lock:
            rr_ms = self.simulator.rr_ms
            return MonitorState(rr_ms=rr_ms, hr_bpm=hr_from_rr(rr_ms), abnormal=self.episodes.abnormal)

    def logs(self) -> tuple[LogEvent, ...]:
        with self._lock:
            return self.event_log.all()

    def clip(self) -> tuple[Sample, ...]:
        with self._lock:
            return tuple(self.episodes.clip)

    def build_report(self, now: datetime | None = None) -> Report:
        with self._lock:
            return export.build_report(
                now=now or self.clock(),
                thresholds=self.episodes.thresholds,
                latest=self.current_state(),
                window=self.episodes.window,
                clip_samples=len(self.episodes.clip),
                log_entries=self.event_log.all(),
                recent_limit=self.config.monitor.report_recent_logs,
            )

    def export_csv(self, path: Path | str) -> Result[Path, ExportError]:
        """Write report, full log and clip to `path`. Failures come back as Result.err."""
        path = Path(path)
        with self._lock:
            report = self.build_report()
            text = export.to_csv(report, self.event_log.all(), self.episodes.clip)
            result = export.write_csv(path, text)

            if result.is_ok():
                self.event_log.append(LogKind.EXPORT_CSV, f"Saved CSV to {path.absolute()}")
                dispatch(self.notifier, NotificationLevel.INFO, "Export saved", str(path.absolute()))
            else:
                error = result.unwrap_err()
                self.event_log.append(LogKind.ERROR, f"CSV export failed: {error.reason}")
                dispatch(self.notifier, NotificationLevel.WARNING, "Export failed", error.reason)
            return result

    def export_report_text(self) -> str:
        """JSON report for sharing; presenting or copying it is the caller's job."""
        with self._lock:
            text = export.report_to_json(self.build_report())
            self.event_log.append(LogKind.EXPORT_COPY, f"Copied report text (len={len(text)})")
            dispatch(self.notifier, NotificationLevel.INFO, "Report ready", "Report text generated")
            return text

    def call_emergency(self) -> None:
        """Mocked emergency call: logged and surfaced, nothing is dialled."""
        number = self.config.contacts.emergency_number
        with self._lock:
            self.event_log.append(LogKind.CALL, f"{number} call tapped (mock)")
        dispatch(
            self.notifier,
            NotificationLevel.WARNING,
            "Emergency call (mock)",
            f"Attempting to contact {number}.",
        )

    def call_guardian(self, index: int) -> None:
        guardians = self.config.contacts.guardians
        if not 0 <= index < len(guardians):
            raise ConfigError(f"No guardian configured at index {index}")
        guardian = guardians[index]
        with self._lock:
            self.event_log.append(
                LogKind.CALL, f"{guardian.name} call tapped (mock): {guardian.phone}"
            )
        dispatch(
            self.notifier,
            NotificationLevel.INFO,
            "Guardian call (mock)",
            f"{guardian.name} ({guardian.phone}): attempting to contact.",
        )
