"""
Operator notification capability.

The core never talks to a screen or a speaker. Whatever presents the monitor
injects a Notifier; dispatch failures are logged and never reach the tick path.
"""

from enum import Enum
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"


class Notifier(Protocol):
    """
    Protocol for surfacing messages to the operator.

    Why Protocol over ABC: Structural typing, easier mocking, less coupling.
    """

    def info(self, title: str, message: str) -> None: ...

    def warning(self, title: str, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier for headless runs: notifications become log events."""

    def __init__(self) -> None:
        self.logger = logger.bind(component="notifier")

    def info(self, title: str, message: str) -> None:
        self.logger.info("operator_notification", title=title, message=message)

    def warning(self, title: str, message: str) -> None:
        self.logger.warning("operator_notification", title=title, message=message)


def dispatch(notifier: Notifier, level: NotificationLevel, title: str, message: str) -> None:
    """Deliver one notification, containing any failure of the presentation side."""
    handler = notifier.warning if level is NotificationLevel.WARNING else notifier.info
    try:
        handler(title, message)
    except Exception as e:
        logger.error("notification_dispatch_failed", error=str(e), title=title)
