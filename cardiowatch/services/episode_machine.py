"""
Abnormal episode detection.

A two-state machine (NORMAL / ABNORMAL) driven by heart rate crossings of the
configured thresholds. Around each episode it captures a clip of samples from
the ring buffer: the pre-onset window when the episode starts and the
post-resolution window when it ends. While an episode is active a single
simulated BLE warning is sent.

Key rules:
- Bounds themselves are normal: abnormal means hr < low or hr > high
- The clip is replaced only at episode start and only appended to afterwards
- Exactly one warning log entry per episode, however many ticks it spans
- evaluate() never raises
"""

import math
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from cardiowatch.domain.models import (
    EpisodeState,
    EventWindowConfig,
    LogKind,
    Sample,
    Thresholds,
    Transition,
)
from cardiowatch.services.event_log import EventLog
from cardiowatch.services.ring_buffer import RingBuffer

logger = structlog.get_logger(__name__)


@dataclass
class Episode:
    """One contiguous abnormal interval and the samples captured around it."""

    start_ts: datetime
    end_ts: datetime | None = None
    clip: list[Sample] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return self.end_ts is None


class AbnormalEpisodeStateMachine:
    """Evaluates readings against thresholds and records episodes in the event log."""

    def __init__(
        self,
        ring: RingBuffer,
        event_log: EventLog,
        thresholds: Thresholds | None = None,
        window: EventWindowConfig | None = None,
        connected: bool = True,
    ) -> None:
        self.ring = ring
        self.event_log = event_log
        self.thresholds = thresholds or Thresholds()
        self.window = window or EventWindowConfig()
        self.connected = connected

        self.state = EpisodeState.NORMAL
        self.episode: Episode | None = None
        self.warning_sent = False
        self.logger = logger.bind(component="episode_machine")

    @property
    def abnormal(self) -> bool:
        return self.state is EpisodeState.ABNORMAL

    @property
    def clip(self) -> list[Sample]:
        """Clip of the current or most recent episode."""
        return self.episode.clip if self.episode else []

    def evaluate(self, hr_bpm: int, rr_ms: int, now: datetime) -> Transition:
        """Apply one reading. Returns the transition performed, if any."""
        now_abnormal = self.thresholds.is_abnormal(hr_bpm)
        transition = Transition.NONE

        if now_abnormal and not self.abnormal:
            self._start_episode(hr_bpm, rr_ms, now)
            transition = Transition.STARTED
        elif not now_abnormal and self.abnormal:
            self._end_episode(now)
            transition = Transition.ENDED

        if self.abnormal and not self.warning_sent:
            self._send_warning(hr_bpm, rr_ms, now)

        return transition

    def reset(self) -> None:
        """Back to NORMAL with no episode, no pending warning and an empty clip."""
        self.state = EpisodeState.NORMAL
        self.episode = None
        self.warning_sent = False

    def _start_episode(self, hr_bpm: int, rr_ms: int, now: datetime) -> None:
        self.state = EpisodeState.ABNORMAL
        self.warning_sent = False
        self.episode = Episode(start_ts=now)
        self.episode.clip.extend(self.ring.extract_last_seconds(self.window.pre_sec, now))

        low, high = self.thresholds.low_bpm, self.thresholds.high_bpm
        self.event_log.append(
            LogKind.ABNORMAL_START,
            f"HR={hr_bpm} bpm, RR={rr_ms}ms (threshold {low}~{high})",
            timestamp=now,
        )
        self.logger.warning(
            "abnormal_episode_started",
            hr_bpm=hr_bpm,
            rr_ms=rr_ms,
            pre_samples=len(self.episode.clip),
        )

    def _end_episode(self, now: datetime) -> None:
        self.state = EpisodeState.NORMAL
        duration = -1
        if self.episode is not None:
            self.episode.clip.extend(self.ring.extract_last_seconds(self.window.post_sec, now))
            self.episode.end_ts = now
            duration = math.floor(now.timestamp()) - math.floor(self.episode.start_ts.timestamp())

        clip_size = len(self.clip)
        self.event_log.append(
            LogKind.ABNORMAL_END,
            f"duration={duration}s, clipSamples={clip_size}",
            timestamp=now,
        )
        self.warning_sent = False
        self.logger.info("abnormal_episode_ended", duration_seconds=duration, clip_samples=clip_size)

    def _send_warning(self, hr_bpm: int, rr_ms: int, now: datetime) -> None:
        self.warning_sent = True
        if self.connected:
            self.event_log.append(
                LogKind.BLE_WARNING_TX,
                f"Sent warning payload {{hr={hr_bpm}, rr={rr_ms}}}",
                timestamp=now,
            )
        else:
            self.event_log.append(
                LogKind.BLE_WARNING_TX_FAIL,
                "BLE disconnected. Payload dropped.",
                timestamp=now,
            )
