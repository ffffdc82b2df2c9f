"""
Domain models for RR-interval heart monitoring.

These models represent the core concepts of the monitor and are framework-agnostic.
They use Pydantic for validation; the accepted ranges mirror what an operator
can dial in on the device settings screen.
"""

import math
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Display format shared by the event log, the report and the CSV export
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def hr_from_rr(rr_ms: int) -> int:
    """Heart rate in bpm for an RR interval, rounded half up."""
    return math.floor(60000 / rr_ms + 0.5)


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(TIMESTAMP_FORMAT)


class EpisodeState(str, Enum):
    """States of the abnormal episode detector."""

    NORMAL = "normal"
    ABNORMAL = "abnormal"


class Transition(str, Enum):
    """What a single evaluation did to the episode state."""

    NONE = "none"
    STARTED = "started"
    ENDED = "ended"


class LogKind(str, Enum):
    """Event log entry types. Values are written verbatim into exports."""

    STREAM_START = "STREAM_START"
    STREAM_STOP = "STREAM_STOP"
    FORCE_ABNORMAL = "FORCE_ABNORMAL"
    RESET = "RESET"
    ABNORMAL_START = "ABNORMAL_START"
    ABNORMAL_END = "ABNORMAL_END"
    BLE_WARNING_TX = "BLE_WARNING_TX"
    BLE_WARNING_TX_FAIL = "BLE_WARNING_TX_FAIL"
    BLE_TOGGLE = "BLE_TOGGLE"
    THRESHOLD_LOW_SET = "THRESHOLD_LOW_SET"
    THRESHOLD_HIGH_SET = "THRESHOLD_HIGH_SET"
    WINDOW_PRE_SET = "WINDOW_PRE_SET"
    WINDOW_POST_SET = "WINDOW_POST_SET"
    CALL = "CALL"
    EXPORT_COPY = "EXPORT_COPY"
    EXPORT_CSV = "EXPORT_CSV"
    ERROR = "ERROR"


class Sample(BaseModel):
    """One summary sample of the RR stream."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    rr_ms: int = Field(gt=0, description="RR interval in milliseconds")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hr_bpm(self) -> int:
        return hr_from_rr(self.rr_ms)


class Thresholds(BaseModel):
    """Heart rate bounds. Values equal to a bound are normal."""

    model_config = ConfigDict(frozen=True)

    low_bpm: int = Field(default=40, ge=20, le=120)
    high_bpm: int = Field(default=180, ge=80, le=240)

    def is_abnormal(self, hr_bpm: int) -> bool:
        return hr_bpm < self.low_bpm or hr_bpm > self.high_bpm


class EventWindowConfig(BaseModel):
    """Seconds of samples captured before onset and after resolution."""

    model_config = ConfigDict(frozen=True)

    pre_sec: int = Field(default=10, ge=5, le=30)
    post_sec: int = Field(default=10, ge=5, le=30)


class LogEvent(BaseModel):
    """Event log entry."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    kind: LogKind
    message: str

    @property
    def ts(self) -> str:
        return format_timestamp(self.timestamp)


class Contact(BaseModel):
    """Guardian reachable through the mocked call actions."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)


class MonitorState(BaseModel):
    """Read-only snapshot of the live reading."""

    model_config = ConfigDict(frozen=True)

    rr_ms: int
    hr_bpm: int
    abnormal: bool


class Report(BaseModel):
    """Point-in-time export snapshot."""

    model_config = ConfigDict(frozen=True)

    exported_at: datetime
    thresholds: Thresholds
    latest: MonitorState
    window: EventWindowConfig
    abnormal_clip_samples: int = Field(ge=0)
    recent_logs: list[LogEvent]
