"""
Core services for the monitor.

This package contains the signal simulator, rolling buffer, episode state
machine, event log, export serializer and the Monitor that wires them together.
"""

from .clock import Clock, ManualClock, SystemClock
from .driver import TickDriver
from .episode_machine import AbnormalEpisodeStateMachine, Episode
from .event_log import EventLog
from .monitor import Monitor
from .notifier import LoggingNotifier, Notifier
from .ring_buffer import RingBuffer
from .simulator import SignalSimulator

__all__ = [
    "AbnormalEpisodeStateMachine",
    "Clock",
    "Episode",
    "EventLog",
    "LoggingNotifier",
    "ManualClock",
    "Monitor",
    "Notifier",
    "RingBuffer",
    "SignalSimulator",
    "SystemClock",
    "TickDriver",
]
