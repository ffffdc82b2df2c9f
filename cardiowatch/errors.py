"""
Exception taxonomy for the monitor.

Only two things can go wrong at the core boundary: a caller hands in a
configuration value outside the accepted range, or the CSV export cannot be
written. A disconnected transport is a normal, logged outcome and has no
exception type.
"""

from pathlib import Path


class MonitorError(Exception):
    """Base class for errors surfaced by the monitor."""


class ConfigError(MonitorError, ValueError):
    """Threshold, window or environment value outside the accepted range."""


class ExportError(MonitorError):
    """CSV export could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write {path}: {reason}")
        self.path = path
        self.reason = reason
