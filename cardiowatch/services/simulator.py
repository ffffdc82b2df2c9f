"""
Simulated RR-interval source.

In production: This would read beat-to-beat intervals from a wearable sensor.
Here the stream idles around a resting rate, drifts occasionally and, rarely,
jumps into a tachycardic or bradycardic excursion.
"""

import random

import structlog

from cardiowatch.config import SimulatorConfig

logger = structlog.get_logger(__name__)

TACHY_RR_MS = 320  # ~188 bpm
BRADY_RR_MS = 1600  # ~38 bpm
RESTING_RR_MS = 800  # ~75 bpm

TACHY_EXCURSION_RANGE = (300, 480)
BRADY_EXCURSION_RANGE = (1300, 2000)


class SignalSimulator:
    """Produces the next RR value each tick from an injected random source."""

    def __init__(self, config: SimulatorConfig | None = None, rng: random.Random | None = None) -> None:
        self.config = config or SimulatorConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.rr_ms: int = self.config.initial_rr_ms
        self.logger = logger.bind(component="signal_simulator")

    def _clamp(self, rr_ms: int) -> int:
        return max(self.config.rr_min_ms, min(self.config.rr_max_ms, rr_ms))

    def tick(self) -> int:
        """Advance one step. Drift and excursion are drawn independently."""
        if self.rng.random() < self.config.drift_probability:
            delta = self.rng.randint(-self.config.drift_max_ms, self.config.drift_max_ms)
            self.rr_ms = self._clamp(self.rr_ms + delta)

        if self.rng.random() < self.config.excursion_probability:
            tachy = self.rng.random() < 0.5
            low, high = TACHY_EXCURSION_RANGE if tachy else BRADY_EXCURSION_RANGE
            self.rr_ms = self.rng.randrange(low, high)
            self.logger.debug("excursion_injected", tachy=tachy, rr_ms=self.rr_ms)

        return self.rr_ms

    def force_tachy(self) -> int:
        self.rr_ms = TACHY_RR_MS
        return self.rr_ms

    def force_brady(self) -> int:
        self.rr_ms = BRADY_RR_MS
        return self.rr_ms

    def reset(self) -> int:
        self.rr_ms = RESTING_RR_MS
        return self.rr_ms
