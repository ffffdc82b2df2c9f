"""
Console presentation adapter.

Stands in for the dialogs of a desktop/mobile front end: notifications are
rendered as rich panels, and the live reading and event log as tables.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cardiowatch.domain.models import LogEvent, MonitorState


class RichConsoleNotifier:
    """Notifier that prints operator messages to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def info(self, title: str, message: str) -> None:
        self.console.print(Panel(message, title=f"💡 {title}", style="green"))

    def warning(self, title: str, message: str) -> None:
        self.console.print(Panel(message, title=f"🚨 {title}", style="bold red"))


def state_panel(state: MonitorState) -> Panel:
    status = "⚠ Abnormal rhythm suspected" if state.abnormal else "✅ Normal"
    style = "red" if state.abnormal else "green"
    return Panel(f"{state.hr_bpm} bpm\n{state.rr_ms} ms (RR interval)", title=status, style=style)


def log_table(events: Sequence[LogEvent], limit: int = 20) -> Table:
    table = Table(title="Event Log")
    table.add_column("Time", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Message", style="white")

    for event in events[:limit]:
        table.add_row(event.ts, event.kind.value, event.message)
    return table
