"""Tests for the rich console presentation adapter."""

from datetime import UTC, datetime

from rich.console import Console

from adapters.console.notifier import RichConsoleNotifier, log_table, state_panel
from cardiowatch.domain.models import LogEvent, LogKind, MonitorState


def recording_console() -> Console:
    return Console(record=True, width=100, force_terminal=False)


def test_notifier_renders_both_levels() -> None:
    console = recording_console()
    notifier = RichConsoleNotifier(console)

    notifier.info("Export saved", "/tmp/export.csv")
    notifier.warning("Abnormal heart rate", "HR 188 bpm outside 40~180 bpm")

    text = console.export_text()
    assert "Export saved" in text
    assert "/tmp/export.csv" in text
    assert "HR 188 bpm outside 40~180 bpm" in text


def test_state_panel_reflects_reading() -> None:
    console = recording_console()
    console.print(state_panel(MonitorState(rr_ms=320, hr_bpm=188, abnormal=True)))

    text = console.export_text()
    assert "188 bpm" in text
    assert "Abnormal" in text


def test_log_table_limits_rows() -> None:
    events = [
        LogEvent(timestamp=datetime(2024, 1, 1, tzinfo=UTC), kind=LogKind.CALL, message=f"m{i}")
        for i in range(5)
    ]

    table = log_table(events, limit=3)

    assert table.row_count == 3
