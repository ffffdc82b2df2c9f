"""
Report building and serialization.

build_report() is a pure snapshot of the monitor. to_csv() renders the fixed
three-section CSV layout consumed by downstream tooling, so its output is
deterministic for a given report, log and clip:

    key,value metadata lines
    <blank>
    LOGS / ts,type,msg            every field quoted, newest entry first
    <blank>
    ABNORMAL_CLIP_SUMMARY_SAMPLES / ts,rr_ms,hr_bpm   oldest sample first
"""

import csv
import io
from collections.abc import Iterable, Sequence
from datetime import datetime
from pathlib import Path

import structlog

from cardiowatch.domain.models import (
    EventWindowConfig,
    LogEvent,
    MonitorState,
    Report,
    Sample,
    Thresholds,
    format_timestamp,
)
from cardiowatch.domain.result import Result
from cardiowatch.errors import ExportError

logger = structlog.get_logger(__name__)

RECENT_LOG_LIMIT = 20

LOGS_HEADER = "LOGS"
CLIP_HEADER = "ABNORMAL_CLIP_SUMMARY_SAMPLES"


def build_report(
    now: datetime,
    thresholds: Thresholds,
    latest: MonitorState,
    window: EventWindowConfig,
    clip_samples: int,
    log_entries: Sequence[LogEvent],
    recent_limit: int = RECENT_LOG_LIMIT,
) -> Report:
    return Report(
        exported_at=now,
        thresholds=thresholds,
        latest=latest,
        window=window,
        abnormal_clip_samples=clip_samples,
        recent_logs=list(log_entries[:recent_limit]),
    )


def to_csv(report: Report, full_log: Iterable[LogEvent], clip: Iterable[Sample]) -> str:
    buffer = io.StringIO()
    plain = csv.writer(buffer, lineterminator="\n")
    quoted = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    # strings quoted, numbers bare
    numeric = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")

    plain.writerows(
        [
            ["exported_at", format_timestamp(report.exported_at)],
            ["threshold_low_bpm", report.thresholds.low_bpm],
            ["threshold_high_bpm", report.thresholds.high_bpm],
            ["event_pre_sec", report.window.pre_sec],
            ["event_post_sec", report.window.post_sec],
            ["latest_rr_ms", report.latest.rr_ms],
            ["latest_hr_bpm", report.latest.hr_bpm],
            ["abnormal_clip_samples", report.abnormal_clip_samples],
        ]
    )
    buffer.write("\n")

    buffer.write(f"{LOGS_HEADER}\n")
    buffer.write("ts,type,msg\n")
    for event in full_log:
        quoted.writerow([event.ts, event.kind.value, event.message])

    buffer.write("\n")
    buffer.write(f"{CLIP_HEADER}\n")
    buffer.write("ts,rr_ms,hr_bpm\n")
    for sample in clip:
        numeric.writerow([format_timestamp(sample.timestamp), sample.rr_ms, sample.hr_bpm])

    return buffer.getvalue()


def report_to_json(report: Report) -> str:
    """Human-readable report text, the payload of the "copy report" action."""
    return report.model_dump_json(indent=2)


def write_csv(path: Path, text: str) -> Result[Path, ExportError]:
    """Write export text to disk. No partial-file cleanup is attempted on failure."""
    try:
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
    except OSError as e:
        logger.error("csv_export_failed", path=str(path), error=str(e))
        return Result.err(ExportError(path, str(e)))

    logger.info("csv_export_written", path=str(path), size=len(text))
    return Result.ok(path)
