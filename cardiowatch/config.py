"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Clinical defaults that match the device settings screen
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from cardiowatch.domain.models import Contact, EventWindowConfig, Thresholds
from cardiowatch.errors import ConfigError

# Load environment variables from .env file
load_dotenv()


class ThresholdConfig(BaseModel):
    """Initial heart rate bounds."""

    low_bpm: int = Field(default=40, ge=20, le=120, description="Bradycardia bound")
    high_bpm: int = Field(default=180, ge=80, le=240, description="Tachycardia bound")

    def to_thresholds(self) -> Thresholds:
        return Thresholds(low_bpm=self.low_bpm, high_bpm=self.high_bpm)


class EventWindowSettings(BaseModel):
    """Initial pre/post capture windows around an episode."""

    pre_sec: int = Field(default=10, ge=5, le=30, description="Seconds kept before onset")
    post_sec: int = Field(default=10, ge=5, le=30, description="Seconds kept after resolution")

    def to_window(self) -> EventWindowConfig:
        return EventWindowConfig(pre_sec=self.pre_sec, post_sec=self.post_sec)


class SimulatorConfig(BaseModel):
    """RR stream simulation parameters."""

    seed: int | None = Field(default=None, description="Seed for reproducible runs")
    initial_rr_ms: int = Field(default=800, ge=300, le=2000)
    rr_min_ms: int = Field(default=300, gt=0)
    rr_max_ms: int = Field(default=2000, gt=0)

    drift_probability: float = Field(default=0.05, ge=0.0, le=1.0)
    drift_max_ms: int = Field(default=20, ge=0)
    excursion_probability: float = Field(default=0.002, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def rr_bounds_ordered(self) -> "SimulatorConfig":
        if self.rr_min_ms > self.rr_max_ms:
            raise ValueError("rr_min_ms must not exceed rr_max_ms")
        return self


class MonitorConfig(BaseModel):
    """Core monitor loop configuration."""

    tick_interval_ms: int = Field(default=50, gt=0, description="Driver period")
    ring_keep_seconds: int = Field(default=20, gt=0, description="Rolling sample window")
    log_capacity: int = Field(default=400, gt=0, description="Max event log entries")
    report_recent_logs: int = Field(default=20, ge=0, description="Log entries in a report")
    ble_connected: bool = Field(default=True, description="Initial simulated link state")


class ContactsConfig(BaseModel):
    """Mocked call targets."""

    emergency_number: str = Field(default="119")
    guardians: list[Contact] = Field(
        default_factory=lambda: [
            Contact(name="Guardian 1", phone="010-1234-5678"),
            Contact(name="Guardian 2", phone="010-8765-4321"),
        ]
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    window: EventWindowSettings = Field(default_factory=EventWindowSettings)
    simulator: SimulatorConfig = Field(default_factory=SimulatorConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    contacts: ContactsConfig = Field(default_factory=ContactsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
    v = val.strip().lower()
    if v in {"dev", "development"}:
        return "development"
    if v in {"stage", "staging"}:
        return "staging"
    return "production"


def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
    v = val.strip().upper()
    return cast(
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
    )


def _parse_bool(val: str | None, default: bool) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _parse_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    seed_raw = os.getenv("SIM_SEED")

    try:
        threshold_config = ThresholdConfig(
            low_bpm=_parse_int("THRESHOLD_LOW_BPM", 40),
            high_bpm=_parse_int("THRESHOLD_HIGH_BPM", 180),
        )

        window_config = EventWindowSettings(
            pre_sec=_parse_int("EVENT_PRE_SEC", 10),
            post_sec=_parse_int("EVENT_POST_SEC", 10),
        )

        simulator_config = SimulatorConfig(
            seed=_parse_int("SIM_SEED", 0) if seed_raw else None,
            initial_rr_ms=_parse_int("SIM_INITIAL_RR_MS", 800),
            drift_probability=_parse_float("SIM_DRIFT_PROBABILITY", 0.05),
            excursion_probability=_parse_float("SIM_EXCURSION_PROBABILITY", 0.002),
        )

        monitor_config = MonitorConfig(
            tick_interval_ms=_parse_int("TICK_INTERVAL_MS", 50),
            ring_keep_seconds=_parse_int("RING_KEEP_SECONDS", 20),
            log_capacity=_parse_int("LOG_CAPACITY", 400),
            report_recent_logs=_parse_int("REPORT_RECENT_LOGS", 20),
            ble_connected=_parse_bool(os.getenv("BLE_CONNECTED"), True),
        )

        contacts_config = ContactsConfig(
            emergency_number=os.getenv("EMERGENCY_NUMBER", "119"),
        )

        logging_config = LoggingConfig(
            level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
            format="console" if debug else "json",
        )

        return AppConfig(
            environment=environment,
            debug=debug,
            thresholds=threshold_config,
            window=window_config,
            simulator=simulator_config,
            monitor=monitor_config,
            contacts=contacts_config,
            logging=logging_config,
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()
