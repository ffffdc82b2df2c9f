"""
Tests for report building and the CSV layout.

The CSV layout is consumed by downstream tooling, so one test pins the exact
text and the rest check it by parsing.
"""

import csv
import io
import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from cardiowatch.domain.models import (
    EventWindowConfig,
    LogEvent,
    LogKind,
    MonitorState,
    Report,
    Sample,
    Thresholds,
)
from cardiowatch.errors import ExportError
from cardiowatch.services.export import build_report, report_to_json, to_csv, write_csv

T0 = datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def log_entries() -> list[LogEvent]:
    return [
        LogEvent(
            timestamp=T0 + timedelta(seconds=30),
            kind=LogKind.ABNORMAL_END,
            message="duration=5s, clipSamples=2",
        ),
        LogEvent(timestamp=T0 + timedelta(seconds=25), kind=LogKind.CALL, message='say "hi"'),
    ]


@pytest.fixture
def clip() -> list[Sample]:
    return [
        Sample(timestamp=T0 + timedelta(seconds=20), rr_ms=800),
        Sample(timestamp=T0 + timedelta(seconds=21), rr_ms=320),
    ]


@pytest.fixture
def report(log_entries: list[LogEvent], clip: list[Sample]) -> Report:
    return build_report(
        now=T0 + timedelta(minutes=1),
        thresholds=Thresholds(low_bpm=40, high_bpm=180),
        latest=MonitorState(rr_ms=800, hr_bpm=75, abnormal=False),
        window=EventWindowConfig(pre_sec=10, post_sec=10),
        clip_samples=len(clip),
        log_entries=log_entries,
    )


def parse_sections(text: str) -> dict[str, list[list[str]]]:
    """Split the export into metadata, log rows and clip rows."""
    metadata, logs, clip_part = text.split("\n\n")
    log_rows = list(csv.reader(io.StringIO(logs)))
    clip_rows = list(csv.reader(io.StringIO(clip_part)))
    assert log_rows[:2] == [["LOGS"], ["ts", "type", "msg"]]
    assert clip_rows[:2] == [["ABNORMAL_CLIP_SUMMARY_SAMPLES"], ["ts", "rr_ms", "hr_bpm"]]
    return {
        "metadata": list(csv.reader(io.StringIO(metadata))),
        "logs": log_rows[2:],
        "clip": clip_rows[2:],
    }


def test_exact_layout(report: Report, log_entries: list[LogEvent], clip: list[Sample]) -> None:
    expected = (
        "exported_at,2024-01-01 00:01:00\n"
        "threshold_low_bpm,40\n"
        "threshold_high_bpm,180\n"
        "event_pre_sec,10\n"
        "event_post_sec,10\n"
        "latest_rr_ms,800\n"
        "latest_hr_bpm,75\n"
        "abnormal_clip_samples,2\n"
        "\n"
        "LOGS\n"
        "ts,type,msg\n"
        '"2024-01-01 00:00:30","ABNORMAL_END","duration=5s, clipSamples=2"\n'
        '"2024-01-01 00:00:25","CALL","say ""hi"""\n'
        "\n"
        "ABNORMAL_CLIP_SUMMARY_SAMPLES\n"
        "ts,rr_ms,hr_bpm\n"
        '"2024-01-01 00:00:20",800,75\n'
        '"2024-01-01 00:00:21",320,188\n'
    )
    assert to_csv(report, log_entries, clip) == expected


def test_reparsed_counts_match_report(
    report: Report, log_entries: list[LogEvent], clip: list[Sample]
) -> None:
    sections = parse_sections(to_csv(report, log_entries, clip))

    assert len(sections["logs"]) == len(report.recent_logs)
    assert len(sections["clip"]) == report.abnormal_clip_samples
    assert dict(sections["metadata"])["abnormal_clip_samples"] == str(len(clip))
    assert sections["logs"][1][2] == 'say "hi"'


def test_empty_log_and_clip(report: Report) -> None:
    sections = parse_sections(to_csv(report, [], []))
    assert sections["logs"] == []
    assert sections["clip"] == []


def test_output_is_deterministic(
    report: Report, log_entries: list[LogEvent], clip: list[Sample]
) -> None:
    assert to_csv(report, log_entries, clip) == to_csv(report, log_entries, clip)


def test_report_keeps_only_recent_logs_in_stored_order() -> None:
    entries = [
        LogEvent(timestamp=T0, kind=LogKind.CALL, message=str(i)) for i in range(50)
    ]
    report = build_report(
        now=T0,
        thresholds=Thresholds(),
        latest=MonitorState(rr_ms=800, hr_bpm=75, abnormal=False),
        window=EventWindowConfig(),
        clip_samples=0,
        log_entries=entries,
    )

    assert [e.message for e in report.recent_logs] == [str(i) for i in range(20)]


def test_report_json(report: Report) -> None:
    payload = json.loads(report_to_json(report))

    assert payload["thresholds"] == {"low_bpm": 40, "high_bpm": 180}
    assert payload["latest"]["hr_bpm"] == 75
    assert payload["abnormal_clip_samples"] == 2
    assert len(payload["recent_logs"]) == 2


def test_write_csv_success(tmp_path: Path) -> None:
    target = tmp_path / "export.csv"
    result = write_csv(target, "a,b\n")

    assert result.is_ok()
    assert result.unwrap() == target
    assert target.read_text(encoding="utf-8") == "a,b\n"


def test_write_csv_failure_is_returned(tmp_path: Path) -> None:
    target = tmp_path / "missing-dir" / "export.csv"
    result = write_csv(target, "a,b\n")

    assert result.is_err()
    error = result.unwrap_err()
    assert isinstance(error, ExportError)
    assert error.path == target
